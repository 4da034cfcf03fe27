"""Error taxonomy for upld.

Every client-visible failure is an ``UpldError`` carrying the HTTP status and
the plain-text body to answer with. Cache faults are the exception: they are
raised by edge cache backends but never reach a client.
"""


class UpldError(Exception):
    """Base class for failures that resolve to a plain-text response."""

    status_code: int = 500
    message: str = "internal error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(UpldError):
    """Client sent an unusable upload body."""

    status_code = 400


class EmptyBody(ValidationError):
    message = "missing upload body"


class TooSmall(ValidationError):
    message = "content too small"


class TooLarge(ValidationError):
    status_code = 413
    message = "content too large"


class NotFound(UpldError):
    """Identifier is malformed, expired, or was never uploaded."""

    status_code = 404
    message = "not found"


class Forbidden(UpldError):
    status_code = 403
    message = "invalid request"


class BackendFault(UpldError):
    """The content store could not be reached or failed mid-operation."""

    status_code = 503
    message = "storage unavailable"


class CacheFault(Exception):
    """The edge cache failed. Callers degrade to origin-only reads."""
