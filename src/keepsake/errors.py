"""Exception types raised by keepsake."""


class KeepsakeError(Exception):
    """Base class for all keepsake errors."""


class InvalidIdentity(KeepsakeError, ValueError):
    """An entity name resolved to an empty or unusable key."""


class ExportFailure(KeepsakeError):
    """An entity's data could not be serialized.

    The codec error is available both as ``cause`` and as ``__cause__``.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class IOFailure(KeepsakeError, OSError):
    """Writing a resource file failed."""


class HydrationError(KeepsakeError, ValueError):
    """A decoded record cannot be turned back into an entity."""
