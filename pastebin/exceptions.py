"""
Error taxonomy for paste operations.
"""


class PasteError(Exception):
    """Base class for all paste errors."""


class ValidationError(PasteError):
    """Client input rejected before any mutation."""


class NotFoundError(PasteError):
    """
    Paste is absent, expired or has used up its views.

    All three look the same to clients; `reason` is kept for logging.
    """

    def __init__(self, paste_id: str, reason: str = "absent"):
        super().__init__(f"Paste {paste_id} not found ({reason})")
        self.paste_id = paste_id
        self.reason = reason


class StorageError(PasteError):
    """Storage backend unavailable or a storage operation failed."""
