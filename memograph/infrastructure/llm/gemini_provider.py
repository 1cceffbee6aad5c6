import logging
import os
import time
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

import google.generativeai as genai

from memograph.core.errors import ConfigurationError, ProviderError
from memograph.core.interfaces.ports import FunctionCall, IChatModel, ILLMProvider, ModelTurn

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash-lite"


def configure(api_key: str = None) -> str:
    api_key = api_key or os.getenv("GEMINI_API_KEY")
    if not api_key:
        raise ConfigurationError("Gemini API Key is required. Set GEMINI_API_KEY env var.")
    genai.configure(api_key=api_key)
    return api_key


class _RateLimiter:
    """Keeps a minimum delay between consecutive requests."""

    def __init__(self, rate_limit_rpm: int):
        self.min_delay = 60.0 / rate_limit_rpm if rate_limit_rpm > 0 else 0.0
        self.last_request_time = 0.0

    def wait(self):
        elapsed = time.time() - self.last_request_time
        if elapsed < self.min_delay:
            time.sleep(self.min_delay - elapsed)

    def mark(self):
        self.last_request_time = time.time()


class GeminiFlashProvider(ILLMProvider):
    def __init__(self, api_key: str = None, model_name: str = None, rate_limit_rpm: int = 60):
        """
        Args:
            rate_limit_rpm: Requests per minute limit
        """
        self.model_name = model_name or os.getenv("GEMINI_MODEL", DEFAULT_MODEL)
        self.api_key = configure(api_key)
        self.limiter = _RateLimiter(rate_limit_rpm)
        self.model = genai.GenerativeModel(self.model_name)

    def generate(self, prompt: str, json_mode: bool = False, response_schema: Optional[Dict[str, Any]] = None) -> str:
        self.limiter.wait()

        generation_config = None
        if json_mode:
            generation_config = {"response_mime_type": "application/json"}
            if response_schema:
                generation_config["response_schema"] = response_schema
        try:
            response = self.model.generate_content(prompt, generation_config=generation_config)
            return response.text
        except Exception as e:
            if "404" in str(e):
                logger.error("Model '%s' not found.", self.model_name)
            raise ProviderError(f"Gemini API failed: {e}") from e
        finally:
            self.limiter.mark()


def to_native(value: Any) -> Any:
    """Converts proto map/repeated values from function call args into plain Python."""
    if isinstance(value, Mapping):
        return {k: to_native(v) for k, v in value.items()}
    if isinstance(value, (str, bytes)):
        return value
    if hasattr(value, "__iter__"):
        return [to_native(v) for v in value]
    return value


def to_part(part: Dict[str, Any]):
    if "function_call" in part:
        call = part["function_call"]
        return genai.protos.Part(
            function_call=genai.protos.FunctionCall(name=call["name"], args=call.get("args") or {})
        )
    if "function_response" in part:
        resp = part["function_response"]
        return genai.protos.Part(
            function_response=genai.protos.FunctionResponse(name=resp["name"], response=resp["response"])
        )
    return genai.protos.Part(text=part.get("text", ""))


def to_contents(contents: List[Dict[str, Any]]) -> List[Any]:
    return [
        genai.protos.Content(role=c["role"], parts=[to_part(p) for p in c["parts"]])
        for c in contents
    ]


def parse_response(response: Any) -> ModelTurn:
    if not response.candidates:
        return ModelTurn()

    texts = []
    calls = []
    for part in response.candidates[0].content.parts:
        fc = getattr(part, "function_call", None)
        if fc is not None and fc.name:
            calls.append(FunctionCall(name=fc.name, args=to_native(fc.args) if fc.args else {}))
        elif getattr(part, "text", None):
            texts.append(part.text)

    return ModelTurn(text="".join(texts) or None, function_calls=calls)


class GeminiChatModel(IChatModel):
    """Tool-calling chat over the Gemini generateContent API."""

    def __init__(self, api_key: str = None, model_name: str = None, rate_limit_rpm: int = 60):
        self.model_name = model_name or os.getenv("GEMINI_MODEL", DEFAULT_MODEL)
        self.api_key = configure(api_key)
        self.limiter = _RateLimiter(rate_limit_rpm)

    def generate_turn(self, contents, tools, system_instruction) -> ModelTurn:
        self.limiter.wait()
        model = genai.GenerativeModel(
            self.model_name,
            tools=tools,
            system_instruction=system_instruction,
        )
        try:
            response = model.generate_content(to_contents(contents))
        except Exception as e:
            raise ProviderError(f"Gemini API failed: {e}") from e
        finally:
            self.limiter.mark()
        return parse_response(response)
