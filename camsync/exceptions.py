"""
Exception classes for camsync.

Hard failures of the synchronization core. Soft failures (a point that
cannot be projected, a distribution without uncertainty) are reported
through boolean flags and never raise.
"""


class InvalidStateError(ValueError):
    """
    A value is missing mandatory fields for the requested operation.

    Raised when ordering identifiers whose endpoint fields are unset, or when
    a VideoSourceID does not have exactly one source variant populated.

    Attributes:
        field: Name of the offending field.
    """

    def __init__(self, message: str, field: str = ""):
        self.field = field
        super().__init__(message)


class OutOfRangeError(IndexError):
    """
    A frame lookup references an index or clock domain that is not available.

    Attributes:
        index: Frame index requested (None when not index based).
        domain: Clock domain requested ('utc' or 'monotonic').
    """

    def __init__(self, message: str, index=None, domain: str = ""):
        self.index = index
        self.domain = domain
        super().__init__(message)
