class MemographError(Exception):
    """Base class for application errors."""


class ConfigurationError(MemographError):
    """A required setting (API key, client id) is missing."""


class ProviderError(MemographError):
    """A hosted model provider failed to produce a response."""


class SpeechUnavailableError(MemographError):
    """No speech transcript source is available."""


class CalendarError(MemographError):
    """The calendar service rejected a request."""
