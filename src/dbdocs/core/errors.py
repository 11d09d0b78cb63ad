"""Error types raised by the documenter core.

The CLI maps these onto exit codes: validation problems are user errors,
catalog problems are database errors. Anything else is unexpected.
"""


class DbDocsError(RuntimeError):
    """Base class for all documenter errors."""


class ValidationError(DbDocsError, ValueError):
    """Raised when configuration or a model invariant is violated."""


class CatalogError(DbDocsError):
    """Raised when catalog introspection fails or returns malformed data."""


class DuplicateKeyError(CatalogError):
    """Raised when two catalog objects claim the same identity."""


class MissingReferenceError(CatalogError):
    """Raised when a key references a column that does not exist."""
