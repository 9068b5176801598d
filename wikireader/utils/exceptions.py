"""Custom exception hierarchy for the application."""


class WikiReaderError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(WikiReaderError):
    """Configuration or environment setup error."""

    pass


class ArchiveIOError(WikiReaderError):
    """Archive or index file could not be opened, mapped or decompressed."""

    pass


class ArticleNotFoundError(WikiReaderError):
    """Requested article is absent from the index or from its block."""

    pass


class MissingPropertyError(WikiReaderError):
    """Archive record lacks a required element."""

    def __init__(self, field: str) -> None:
        """Initialize exception.

        Args:
            field: Name of the missing element
        """
        super().__init__(f"missing property on page: {field}")
        self.field = field


class ParseError(WikiReaderError):
    """Malformed record XML, id or timestamp."""

    pass


class UrlError(WikiReaderError):
    """Viewer URL could not be routed."""

    pass


class UnknownNamespaceError(UrlError):
    """URL namespace not found."""

    pass


class IncompletePathError(UrlError):
    """URL path is incomplete."""

    pass


class MissingParameterError(UrlError):
    """Missing query parameter."""

    pass
