class BlogError(Exception):
    """Base class for expected, caller-recoverable failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BlogError):
    """A referenced entity does not exist or is not visible to the caller."""


class ValidationError(BlogError):
    """Caller-supplied data violates a business rule."""
