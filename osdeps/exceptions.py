"""Custom exceptions for osdeps."""


class OsDepsError(Exception):
    """Base exception for all osdeps errors."""


class ScanError(OsDepsError):
    """Raised when the environment cannot be enumerated at all."""


class ParseError(OsDepsError):
    """Raised when a single artifact cannot be parsed."""

    def __init__(self, path: str, cause: BaseException | str):
        self.path = path
        self.cause = cause
        super().__init__(f"cannot parse {path}: {cause}")


class UnsupportedTargetError(OsDepsError):
    """Raised when no parser or scanner exists for the requested target."""


class OutputFormatError(OsDepsError):
    """Raised when an unsupported output format is requested."""


class ConfigError(OsDepsError):
    """Raised when a configuration file cannot be read or is malformed."""


class ConfigurationWarning(UserWarning):
    """No ignore list is defined for the target OS; nothing is filtered."""
