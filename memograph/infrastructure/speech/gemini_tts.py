import base64
import logging
import os
import wave
from typing import Optional

import requests

from memograph.core.errors import ConfigurationError
from memograph.core.interfaces.ports import ISpeechSynthesizer

logger = logging.getLogger(__name__)

API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiSpeechSynthesizer(ISpeechSynthesizer):
    sample_rate = 24000

    def __init__(
        self,
        api_key: str = None,
        model_name: str = "gemini-2.5-flash-preview-tts",
        voice_name: str = "Kore",
        timeout: int = 60,
    ):
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not self.api_key:
            raise ConfigurationError("Gemini API Key is required. Set GEMINI_API_KEY env var.")
        self.model_name = model_name
        self.voice_name = voice_name
        self.timeout = timeout
        self.api_url = f"{API_BASE}/{model_name}:generateContent"

    def synthesize(self, text: str) -> Optional[str]:
        payload = {
            "contents": [{"parts": [{"text": text}]}],
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": self.voice_name}}
                },
            },
        }
        try:
            response = requests.post(
                self.api_url,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
            return data["candidates"][0]["content"]["parts"][0]["inlineData"]["data"]
        except (requests.exceptions.RequestException, KeyError, IndexError, ValueError) as e:
            logger.error("TTS error: %s", e)
            return None


def decode_audio(base64_audio: str) -> bytes:
    return base64.b64decode(base64_audio)


def write_wav(pcm: bytes, path: str, sample_rate: int = 24000, channels: int = 1) -> str:
    """Wraps raw little-endian 16-bit PCM into a WAV file."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    with wave.open(path, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)
    return path
