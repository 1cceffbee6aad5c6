import os
from dataclasses import dataclass
from typing import Optional


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    try:
        return int(value) if value else default
    except ValueError:
        return default


@dataclass
class Settings:
    """Runtime configuration, read from the environment (.env is loaded by the launcher)."""
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash-lite"
    embedding_model: str = "models/text-embedding-004"
    tts_model: str = "gemini-2.5-flash-preview-tts"
    tts_voice: str = "Kore"
    rate_limit_rpm: int = 60

    llm_provider: str = "gemini"
    ollama_url: str = "http://localhost:11434"
    ollama_model: str = "gemma3:12b"

    store: str = "json"
    store_path: str = "memograph_store.json"

    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    google_refresh_token: Optional[str] = None
    google_access_token: Optional[str] = None

    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        store = os.getenv("MEMOGRAPH_STORE", "json").lower()
        default_path = "memograph.db" if store == "sqlite" else "memograph_store.json"
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL", cls.gemini_model),
            embedding_model=os.getenv("GEMINI_EMBEDDING_MODEL", cls.embedding_model),
            tts_model=os.getenv("GEMINI_TTS_MODEL", cls.tts_model),
            tts_voice=os.getenv("GEMINI_TTS_VOICE", cls.tts_voice),
            rate_limit_rpm=_int_env("GEMINI_RATE_LIMIT_RPM", cls.rate_limit_rpm),
            llm_provider=os.getenv("LLM_PROVIDER", cls.llm_provider).lower(),
            ollama_url=os.getenv("OLLAMA_URL", cls.ollama_url),
            ollama_model=os.getenv("OLLAMA_MODEL", cls.ollama_model),
            store=store,
            store_path=os.getenv("MEMOGRAPH_STORE_PATH", default_path),
            google_client_id=os.getenv("GOOGLE_CLIENT_ID"),
            google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET"),
            google_refresh_token=os.getenv("GOOGLE_REFRESH_TOKEN"),
            google_access_token=os.getenv("GOOGLE_ACCESS_TOKEN"),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
        )

    @property
    def calendar_configured(self) -> bool:
        return bool(self.google_access_token or (self.google_client_id and self.google_refresh_token))
