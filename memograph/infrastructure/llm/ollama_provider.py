from typing import Any, Dict, Optional

import requests

from memograph.core.errors import ProviderError
from memograph.core.interfaces.ports import ILLMProvider


class OllamaGemmaProvider(ILLMProvider):
    def __init__(self, model_name: str = "gemma3:12b", base_url: str = "http://localhost:11434", timeout: int = 120):
        self.model_name = model_name
        self.base_url = base_url
        self.api_url = f"{base_url}/api/generate"
        self.timeout = timeout

    def generate(self, prompt: str, json_mode: bool = False, response_schema: Optional[Dict[str, Any]] = None) -> str:
        payload = {
            "model": self.model_name,
            "prompt": prompt,
            "stream": False
        }
        if json_mode:
            # Gemini schemas do not apply here; a list may come back wrapped in an object
            payload["format"] = "json"

        try:
            response = requests.post(self.api_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
            return data.get("response", "")
        except requests.exceptions.RequestException as e:
            raise ProviderError(f"Ollama connection failed: {e}") from e
