"""
Prompts and tool declarations for the note agent.

Tools exposed to the chat model:
- createNote / updateNote / deleteNote: note mutations
- searchNotes: semantic search over note embeddings
- ragAnswer: answer a question from a list of notes
- clusterNotes: regroup all notes into named clusters
- openNote: show a note to the user
- summarizeNote / rewriteNote: LLM edits of a single note
- createCalendarEvent: quick-add an event from natural language
"""

import json
import re
from typing import Any, Dict, List


def _object(properties: Dict[str, Any], required: List[str] = None) -> Dict[str, Any]:
    schema = {"type": "OBJECT", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def _string(description: str) -> Dict[str, str]:
    return {"type": "STRING", "description": description}


AGENT_FUNCTION_DECLARATIONS: List[Dict[str, Any]] = [
    {
        "name": "createNote",
        "description": "Create a new note with a title and content. Returns the new Note ID.",
        "parameters": _object(
            {
                "title": _string("Title of the note"),
                "content": _string("The body content of the note"),
            },
            ["title", "content"],
        ),
    },
    {
        "name": "updateNote",
        "description": "Update an existing note. Only provide fields that need changing.",
        "parameters": _object(
            {
                "noteId": _string("The ID of the note to update"),
                "title": _string("New title (optional)"),
                "content": _string("New content (optional)"),
            },
            ["noteId"],
        ),
    },
    {
        "name": "deleteNote",
        "description": "Delete a note by ID. REQUIRE EXPLICIT USER CONFIRMATION BEFORE CALLING THIS.",
        "parameters": _object({"noteId": _string("The ID of the note to delete")}, ["noteId"]),
    },
    {
        "name": "searchNotes",
        "description": (
            "Search for notes semantically using embeddings. Returns up to 5 notes, each with a score "
            "and a 'highlyRelevant' flag (score > 0.3). When reporting results, only count highly "
            "relevant notes as \"related\" or \"relevant\" to the query."
        ),
        "parameters": _object({"query": _string("The search query")}, ["query"]),
    },
    {
        "name": "ragAnswer",
        "description": "Answer a specific question using a provided list of note IDs as context.",
        "parameters": _object(
            {
                "query": _string("The user question"),
                "candidateNoteIds": {
                    "type": "ARRAY",
                    "items": {"type": "STRING"},
                    "description": "List of Note IDs to use as source material",
                },
            },
            ["query", "candidateNoteIds"],
        ),
    },
    {
        "name": "clusterNotes",
        "description": "Re-organize all notes into semantic clusters.",
        "parameters": _object(
            {"k": {"type": "NUMBER", "description": "Approximate number of clusters (default 5)"}}
        ),
    },
    {
        "name": "openNote",
        "description": "Open a specific note in the UI for the user to see.",
        "parameters": _object({"noteId": _string("The ID of the note to open")}, ["noteId"]),
    },
    {
        "name": "summarizeNote",
        "description": "Generate a summary for a specific note.",
        "parameters": _object({"noteId": _string("The ID of the note to summarize")}, ["noteId"]),
    },
    {
        "name": "rewriteNote",
        "description": 'Rewrite or improve a note based on an instruction (e.g. "fix grammar", "make concise").',
        "parameters": _object(
            {
                "noteId": _string("The ID of the note to rewrite"),
                "instruction": _string('What to do (e.g. "make it professional")'),
            },
            ["noteId", "instruction"],
        ),
    },
    {
        "name": "createCalendarEvent",
        "description": (
            "Create a calendar event in the user's Google Calendar using natural language. The text "
            'parameter should include the event details like "Meeting with John tomorrow at 2pm" or '
            '"Dentist appointment on March 15 at 10am".'
        ),
        "parameters": _object(
            {
                "text": _string(
                    "Natural language description of the event including date/time. Example: "
                    '"Team meeting tomorrow at 3pm" or "Doctor appointment on March 20 at 2:30pm"'
                )
            },
            ["text"],
        ),
    },
]

AGENT_TOOLS: List[Dict[str, Any]] = [{"function_declarations": AGENT_FUNCTION_DECLARATIONS}]

TOOL_NAMES = [d["name"] for d in AGENT_FUNCTION_DECLARATIONS]


AGENT_SYSTEM_INSTRUCTION = """
You are Memorunia, an intelligent and creative knowledge assistant.
You manage the user's personal notes.

Capabilities:
1. You can Create, Update, Delete, Search, and Organize notes using tools.
2. You can Answer questions based on notes using 'ragAnswer'.

Rules:
- **Content Generation**: If the user asks to create a note about a topic (e.g., "Create a note with a Shawarma recipe") but does NOT provide the exact text, **YOU MUST GENERATE** high-quality, detailed content for that topic using your own knowledge, and then call 'createNote' with that generated content. Do not ask the user to provide the text if they asked you to create the note about a known topic.
- ALWAYS 'searchNotes' first if you need to find a note to Update, Delete, or Answer from.
- **Answering Questions**: When answering questions:
  1. First use 'searchNotes' to find relevant notes
  2. Each search result carries a 'highlyRelevant' flag (score > 0.3)
  3. When reporting how many notes you found, ONLY count notes that are highly relevant
  4. Then use 'ragAnswer' with the note IDs from search results
  5. The 'ragAnswer' tool will automatically filter to only relevant notes
  6. Always cite sources in your response, but ONLY cite notes that were actually used and are truly relevant
- Ambiguity: If 'searchNotes' returns multiple similar results, ASK the user to clarify which one they mean.
- Safety: BEFORE calling 'deleteNote', you MUST ask the user for confirmation (e.g., "Are you sure you want to delete 'Grocery List'?"). Only proceed if they say "yes".
- Privacy: Do not invent information when answering questions *about existing notes*. If a note isn't found, say so.
- **Calendar Events**: When the user asks to create a calendar event, reminder, or schedule something, use 'createCalendarEvent' with natural language text that includes the event description and date/time.
- Be concise, friendly, and helpful.
"""

SYSTEM_INSTRUCTION_RAG = """
You are Memorunia, a personal knowledge assistant.
Answer the user's question STRICTLY based on the provided Context Notes.
If the answer is not in the notes, state that clearly.
Do not make up information.
Cite your sources by referring to the note titles if relevant.
Format with markdown. Keep it concise and helpful.
"""

RAG_ANSWER_PROMPT = """{system_instruction}
Question: "{query}"

Context Notes (only use information from these notes):
{context_text}

Instructions:
- Answer the question STRICTLY using only the information from the context notes above.
- If the context notes don't contain enough information to answer the question, say so clearly.
- ALWAYS cite your sources at the end of your answer using this format:

  **Sources:**
  - [Note Title 1]
  - [Note Title 2]

- Only cite notes that you actually used to answer the question.
- If you didn't use any notes (because they weren't relevant), don't include a Sources section.
- Format your answer with markdown for readability.
"""

CLUSTER_RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "items": _object(
        {"name": {"type": "STRING"}, "noteIds": {"type": "ARRAY", "items": {"type": "STRING"}}},
        required=["name", "noteIds"],
    ),
}

CLUSTER_PROMPT = """Group these notes into clusters. Return JSON: [{{ "name": "...", "noteIds": ["..."] }}]

Notes:
{notes_json}
"""

REWRITE_PROMPT = """Rewrite this text based on instruction: "{instruction}"

Text:
{content}"""

SUMMARIZE_INSTRUCTION = "Summarize this in 2 sentences."

NO_RELEVANT_NOTES_ANSWER = (
    "I couldn't find any relevant notes to answer your question. "
    "The available notes don't seem to contain information related to your query."
)

NO_RELEVANT_CANDIDATES_ANSWER = (
    "I couldn't find any relevant notes to answer your question. "
    "The notes you referenced don't seem to contain information related to your query. "
    "Try searching for more relevant notes first."
)

AGENT_GREETING = (
    "Hi there! I'm your creative note agent. I can help you find info, organize your thoughts, "
    "or even write new notes for you (like recipes or plans). What can I do for you today?"
)

AGENT_ERROR_REPLY = "Sorry, I encountered an error while processing your request."


def format_context_notes(notes: List[Any], relevance_scores: Dict[str, float] = None) -> str:
    """Format notes as context blocks for the answer prompt."""
    blocks = []
    for note in notes:
        score = relevance_scores.get(note.id) if relevance_scores else None
        score_note = f" [Relevance: {score * 100:.0f}%]" if score is not None else ""
        blocks.append(f"Title: {note.title}{score_note}\nContent: {note.content}")
    return "\n\n---\n\n".join(blocks)


def clean_json_string(text: str) -> str:
    """Strips a leading/trailing markdown code fence from a model reply."""
    text = re.sub(r"^```(?:json)?\s*", "", text.strip())
    return re.sub(r"\s*```$", "", text)


def parse_cluster_response(response: str) -> List[Dict[str, Any]]:
    """
    Parse the clustering reply into [{"name": str, "noteIds": [str]}].
    Accepts a bare list, a single cluster object or an object wrapping one
    list. Raises ValueError for anything else.
    """
    raw = json.loads(clean_json_string(response or "[]"))
    if isinstance(raw, dict):
        # JSON mode without a schema wraps the list, e.g. {"clusters": [...]}
        if "noteIds" in raw:
            raw = [raw]
        else:
            lists = [v for v in raw.values() if isinstance(v, list)]
            if len(lists) == 1:
                raw = lists[0]
    if not isinstance(raw, list):
        raise ValueError("Cluster response is not a list")

    clusters = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        note_ids = item.get("noteIds") or []
        clusters.append({
            "name": str(item.get("name") or "Untitled"),
            "noteIds": [str(n) for n in note_ids],
        })
    return clusters
