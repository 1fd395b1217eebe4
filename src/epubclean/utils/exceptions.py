"""Custom exception hierarchy for epubclean."""


class EpubCleanError(Exception):
    """Base exception for all epubclean errors."""


class NotFoundError(EpubCleanError):
    """Raised when an archive, directory or required metadata document is missing."""


class MalformedInputError(EpubCleanError):
    """Raised when markup, metadata XML or a zip container cannot be parsed."""


class MalformedEntityError(MalformedInputError):
    """Raised when a numeric character reference does not denote a valid code point."""


class TransportError(EpubCleanError):
    """Raised when the network request for a cover image fails."""


class FilesystemError(EpubCleanError):
    """Raised when reading, writing or deleting files fails."""
