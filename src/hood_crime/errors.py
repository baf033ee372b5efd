"""Exception taxonomy shared by every pipeline stage."""


class CrimeSummaryError(Exception):
    """Base class for all pipeline failures.

    `stage` is set by the pipeline runner to the name of the stage that
    raised; it stays None when a component is called directly.
    """
    stage = None


class SchemaError(CrimeSummaryError):
    """Raised when a table does not match the expected columns or values."""
    pass


class UnknownCategoryError(CrimeSummaryError):
    """Raised when a requested category or metric cannot be derived."""
    pass


class InvalidArgumentError(CrimeSummaryError):
    """Raised when a caller-supplied parameter is out of range."""
    pass


class NotFoundError(CrimeSummaryError):
    """Raised when a lookup key (e.g. a neighbourhood id) is absent."""
    pass
