import logging
import os
import sys
from typing import List, Optional, TextIO

import google.generativeai as genai

from memograph.core.errors import ProviderError
from memograph.core.interfaces.ports import ITranscriptSource, TranscriptCallback, TranscriptResult
from memograph.infrastructure.llm.gemini_provider import DEFAULT_MODEL, configure

logger = logging.getLogger(__name__)

TRANSCRIBE_PROMPT = "Transcribe this audio verbatim. Return only the spoken words."


class LineTranscriptSource(ITranscriptSource):
    """
    Terminal dictation: every non-empty line of the stream is a final result.
    Each batch covers the whole session so the transcript accumulates.
    """

    def __init__(self, stream: TextIO = None):
        self.stream = stream or sys.stdin
        self.results: List[TranscriptResult] = []
        self._stopped = False

    def start(self, on_result: TranscriptCallback) -> None:
        self._stopped = False
        self.results = []
        for line in self.stream:
            if self._stopped:
                break
            text = line.strip()
            if not text:
                continue
            if self.results:
                text = " " + text
            self.results.append(TranscriptResult(transcript=text, is_final=True))
            on_result(self.results, 0)

    def stop(self) -> None:
        self._stopped = True


class GeminiAudioTranscriptSource(ITranscriptSource):
    """Transcribes a recorded audio file with the hosted model; emits one final result."""

    def __init__(self, audio_path: str, api_key: str = None, model_name: Optional[str] = None):
        configure(api_key)
        self.audio_path = audio_path
        self.model_name = model_name or os.getenv("GEMINI_MODEL", DEFAULT_MODEL)

    def start(self, on_result: TranscriptCallback) -> None:
        if not os.path.exists(self.audio_path):
            raise FileNotFoundError(f"Audio file not found at {self.audio_path}")

        try:
            audio = genai.upload_file(self.audio_path)
            model = genai.GenerativeModel(self.model_name)
            response = model.generate_content([TRANSCRIBE_PROMPT, audio])
            text = (response.text or "").strip()
        except Exception as e:
            raise ProviderError(f"Transcription failed: {e}") from e

        logger.info("Transcribed %d characters from %s", len(text), self.audio_path)
        on_result([TranscriptResult(transcript=text, is_final=True)], 0)

    def stop(self) -> None:
        pass
