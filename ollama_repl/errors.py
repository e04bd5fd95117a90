"""Exception types shared across the REPL."""


class ReplError(Exception):
    """Base class for reportable ollama-repl failures."""


class ConfigError(ReplError):
    """Raised for invalid configuration (missing model, malformed host URL, bad config file)."""


class ApiError(ReplError):
    """Raised when a call to the Ollama HTTP API fails.

    ``partial`` holds whatever assistant text had been streamed before the
    failure, for diagnostics only.
    """

    def __init__(self, message: str, partial: str = ""):
        super().__init__(message)
        self.partial = partial


class ConnectivityError(ReplError):
    """Raised when the startup reachability check fails."""


class ModelNotFoundError(ConnectivityError):
    """The host is reachable but the configured model is not installed on it."""

    def __init__(self, message: str, available_models: list[str]):
        super().__init__(message)
        self.available_models = available_models


class UnknownModeError(ReplError):
    """Raised by the mode factory for a tag outside the known modes."""


class FileIngestError(ReplError):
    """Base class for failures while reading a file into the conversation."""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class FileNotFoundForContext(FileIngestError):
    pass


class FileNotReadable(FileIngestError):
    pass


class FileReadFailed(FileIngestError):
    pass
