"""Exception hierarchy for the promptx transform."""


class PromptxError(Exception):
    """Base class for every failure raised by promptx_build."""


class SourceUnreadable(PromptxError):
    """The prompt source file is missing or cannot be read."""


class StorageError(PromptxError):
    """Cache directory I/O failed; no entry is considered written."""


class GenerationError(PromptxError):
    """The generation call failed; nothing is written to the cache."""


class ResolutionError(PromptxError):
    """A referenced prompt file could not be located on disk."""


class ConfigError(PromptxError):
    """Startup configuration is invalid (for example no model configured)."""


__all__ = [
    "PromptxError",
    "SourceUnreadable",
    "StorageError",
    "GenerationError",
    "ResolutionError",
    "ConfigError",
]
