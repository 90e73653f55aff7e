"""
Exceptions raised by the Pagewright build pipeline.

Every error defined here is fatal for the build that raised it.
"""


class PagewrightError(Exception):
    """Base class for all build errors."""


class ConfigurationError(PagewrightError):
    """Raised when the task configuration is missing or invalid."""


class MalformedMetadata(PagewrightError):
    """Raised when a source file's metadata block cannot be parsed."""

    def __init__(self, path, reason=None):
        self.path = path
        self.reason = reason
        message = f"the metadata for the following post is formatted incorrectly: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class EmptyDocument(PagewrightError):
    """Raised when a source file has no content after its metadata."""

    def __init__(self, path):
        self.path = path
        super().__init__(
            f"the following post is blank, please add some content to it or delete it: {path}"
        )


class MissingUrlSegment(PagewrightError):
    """Raised when the URL template names a key the post metadata lacks."""

    def __init__(self, segment, path=None):
        self.segment = segment
        self.path = path
        super().__init__(
            f"required {segment} attribute not found in post metadata at {path}."
        )


class InvalidListPagePath(PagewrightError):
    """Raised when the list page template lies outside the page source tree."""

    def __init__(self, list_page, page_src):
        self.list_page = list_page
        self.page_src = page_src
        super().__init__(
            f"the listPage must be within the pageSrc directory ({list_page} is not inside {page_src})"
        )


class InjectedDataParseError(PagewrightError):
    """Raised when the external JSON data file can't be read or parsed."""

    def __init__(self, path, error):
        self.path = path
        self.error = error
        super().__init__(f"{error} when parsing {path}")


class UnknownTemplateEngine(ConfigurationError):
    """Raised when no template engine is registered for a file extension."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"no template engine registered for {path}")
