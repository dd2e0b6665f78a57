# Error kinds raised by the comparison engine.
#
# ValidationError        -> bad input, raised before any I/O
# IngestionSizeError     -> file bigger than the size ceiling
# IngestionRowCountError -> file has more rows than the row ceiling
# IngestionReadError     -> missing file / permission / decode failure
#
# Malformed content inside a valid file is never an error.


class CompareError(Exception):
    """Base class for every error the comparer raises on purpose."""


class ValidationError(CompareError, ValueError):
    pass


class IngestionError(CompareError):
    """A source file could not be loaded. Nothing from it may be compared."""

    def __init__(self, path, message):
        super().__init__(message)
        self.path = path


class IngestionSizeError(IngestionError):
    pass


class IngestionRowCountError(IngestionError):
    pass


class IngestionReadError(IngestionError):
    pass


class SourceNotFoundError(IngestionReadError):
    pass
