"""
Exception hierarchy for the URL shortener core.

Audit write failures are deliberately absent: they are logged by the
auditor and never raised.
"""


class ShortenerError(Exception):
    """Base exception for all store errors"""

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


class ShortCodeConflictError(ShortenerError):
    """An active mapping already uses this short code"""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' is already registered")


class PersistenceError(ShortenerError):
    """A primary store operation failed in the database driver"""


class SchemaBootstrapError(ShortenerError):
    """Schema creation or seeding failed; the process must not serve"""


class UnknownMetaTypeError(ShortenerError):
    """A stored meta type code has no MetaType counterpart"""

    def __init__(self, code):
        self.code = code
        super().__init__(f"Unknown meta type code: {code!r}")
