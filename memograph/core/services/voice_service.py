import logging
from typing import List, Optional

from memograph.core.errors import SpeechUnavailableError
from memograph.core.interfaces.ports import ITranscriptSource, TranscriptResult

logger = logging.getLogger(__name__)


def combine_results(results: List[TranscriptResult], result_index: int = 0) -> str:
    """Final text of a batch if there is any, otherwise its interim text."""
    final = ""
    interim = ""
    for result in results[result_index:]:
        if result.is_final:
            final += result.transcript
        else:
            interim += result.transcript
    return final or interim


class VoiceInput:
    """
    Continuous dictation into a shared text field. The latest batch of
    results overwrites the transcript (last write wins).
    """

    def __init__(self, source: Optional[ITranscriptSource] = None):
        self.source = source
        self.is_listening = False
        self.transcript = ""

    @property
    def supported(self) -> bool:
        return self.source is not None

    def _on_result(self, results: List[TranscriptResult], result_index: int) -> None:
        text = combine_results(results, result_index)
        if text:
            self.transcript = text

    def start(self) -> None:
        if self.source is None:
            raise SpeechUnavailableError("Speech not supported")
        self.transcript = ""
        self.is_listening = True
        try:
            self.source.start(self._on_result)
        except Exception:
            logger.exception("Speech error")
            self.is_listening = False
            raise

    def stop(self) -> str:
        """Stops listening and hands back the transcript, clearing it."""
        if self.source is not None and self.is_listening:
            self.source.stop()
        self.is_listening = False
        text = self.transcript
        self.transcript = ""
        return text

    def toggle(self) -> Optional[str]:
        """Starts listening, or stops and returns the transcript."""
        if self.is_listening:
            return self.stop()
        self.start()
        return None
