class SiteHubError(Exception):
    """Base class for errors raised by the site hub core."""


class PageValidationError(SiteHubError):
    """A page save was missing its filename or content."""


class StoreError(SiteHubError):
    """The page store backend could not complete a query."""


class PublishPayloadError(SiteHubError):
    """A publish payload carried malformed encoded data."""


class ArchiveError(SiteHubError):
    """Writing the zip archive failed."""


class DispatchError(SiteHubError):
    """The archive could not be emailed."""
