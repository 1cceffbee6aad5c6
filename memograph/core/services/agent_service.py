"""
AgentService - bounded tool-calling conversation with the chat model.

One user turn runs at most MAX_ITERATIONS model calls. Each call either
ends the turn with text, or asks for tools; the tools run in order against
the current snapshot and their results are fed back on the next call.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from memograph.core.domain.note import (
    ChatMessage,
    Cluster,
    Note,
    ToolCallLog,
    ToolResultLog,
    new_id,
)
from memograph.core.domain.similarity import RELEVANT_THRESHOLD
from memograph.core.interfaces.ports import IChatModel
from memograph.core.services.prompts import AGENT_ERROR_REPLY, AGENT_SYSTEM_INSTRUCTION, AGENT_TOOLS
from memograph.core.services.tool_executor import ToolExecutor

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 5


@dataclass
class AgentTurn:
    messages: List[ChatMessage] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)
    clusters: List[Cluster] = field(default_factory=list)
    opened_note_id: Optional[str] = None
    completed: bool = False
    iterations: int = 0


def build_history(history: Sequence[ChatMessage]) -> List[Dict[str, Any]]:
    """Maps the transcript onto model contents. Entries without text are skipped."""
    contents = []
    for message in history:
        if not message.content:
            continue
        role = "user" if message.role == "user" else "model"
        contents.append({"role": role, "parts": [{"text": message.content}]})
    return contents


def pick_source_ids(name: str, result: Any, current: Optional[List[str]]) -> Optional[List[str]]:
    """
    ragAnswer's used ids always win; highly relevant searchNotes hits are a
    fallback used only while nothing else has been attributed.
    """
    if not isinstance(result, dict):
        return current
    if name == "ragAnswer" and result.get("usedNoteIds") is not None:
        return list(result["usedNoteIds"])
    if name == "searchNotes" and result.get("results") and not current:
        high = [r["id"] for r in result["results"] if r.get("score", 0) > RELEVANT_THRESHOLD]
        if high:
            return high
    return current


class AgentService:
    def __init__(
        self,
        chat_model: IChatModel,
        executor: ToolExecutor,
        max_iterations: int = MAX_ITERATIONS,
        system_instruction: str = AGENT_SYSTEM_INSTRUCTION,
    ):
        self.chat_model = chat_model
        self.executor = executor
        self.max_iterations = max_iterations
        self.system_instruction = system_instruction

    def run_turn(
        self,
        user_text: str,
        history: Sequence[ChatMessage],
        notes: Sequence[Note],
        clusters: Sequence[Cluster],
        on_message: Optional[Callable[[ChatMessage], None]] = None,
    ) -> AgentTurn:
        """
        Runs one user turn. `history` is the transcript before `user_text`;
        the user message itself is not part of the returned messages.
        """
        turn = AgentTurn(notes=list(notes), clusters=list(clusters))

        def emit(message: ChatMessage, is_new: bool = True):
            if is_new:
                turn.messages.append(message)
            if on_message:
                on_message(message)

        contents = build_history(history)
        contents.append({"role": "user", "parts": [{"text": user_text}]})
        source_note_ids: Optional[List[str]] = None

        try:
            while not turn.completed and turn.iterations < self.max_iterations:
                turn.iterations += 1
                logger.debug("Agent iteration %d/%d", turn.iterations, self.max_iterations)

                response = self.chat_model.generate_turn(contents, AGENT_TOOLS, self.system_instruction)
                calls = response.function_calls or []

                if response.text and not calls:
                    emit(ChatMessage(
                        id=new_id(),
                        role="assistant",
                        content=response.text,
                        source_note_ids=source_note_ids,
                    ))
                    turn.completed = True
                elif calls:
                    tool_log = ChatMessage(
                        id=new_id(),
                        role="assistant",
                        tool_calls=[ToolCallLog(id=new_id(), name=c.name, args=dict(c.args)) for c in calls],
                    )
                    emit(tool_log)

                    results_log: List[ToolResultLog] = []
                    responses = []
                    for call in calls:
                        outcome = self.executor.execute(call.name, call.args, turn.notes, turn.clusters)
                        turn.notes = outcome.notes
                        turn.clusters = outcome.clusters
                        if outcome.opened_note_id:
                            turn.opened_note_id = outcome.opened_note_id

                        results_log.append(ToolResultLog(id=new_id(), name=call.name, result=outcome.result))
                        source_note_ids = pick_source_ids(call.name, outcome.result, source_note_ids)
                        responses.append({"name": call.name, "response": {"result": outcome.result}})

                    tool_log.tool_results = results_log
                    emit(tool_log, is_new=False)

                    contents.append({
                        "role": "model",
                        "parts": [{"function_call": {"name": c.name, "args": dict(c.args)}} for c in calls],
                    })
                    contents.append({
                        "role": "user",
                        "parts": [{"function_response": r} for r in responses],
                    })
        except Exception:
            logger.exception("Agent loop error")
            emit(ChatMessage(id=new_id(), role="assistant", content=AGENT_ERROR_REPLY))
            return turn

        if not turn.completed:
            logger.warning("Agent stopped after %d iterations without a final answer", turn.iterations)
        return turn
