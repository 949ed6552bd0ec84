class CodeAssistError(Exception):
    """Base class for errors that surface to callers of the engine."""


class RepositoryNotFoundError(CodeAssistError, FileNotFoundError):
    """The repository root does not exist or is not a directory."""

    def __init__(self, root: str) -> None:
        super().__init__(f"Repository root not found or not a directory: {root}")
        self.root = root


class ConfigError(CodeAssistError, ValueError):
    """The configuration file or environment holds invalid values."""
