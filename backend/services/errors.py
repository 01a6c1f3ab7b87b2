"""Error types raised by the chat relay services."""


class ValidationError(Exception):
    """A required field was missing or blank."""


class PersistenceError(Exception):
    """The training snapshot could not be written to disk."""
