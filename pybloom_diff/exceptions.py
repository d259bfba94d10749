"""Exception hierarchy for pybloom_diff."""


class PyBloomDiffError(Exception):
    """Base class for all pybloom_diff errors."""


class RecordFileError(PyBloomDiffError):
    """A record file could not be opened or read.

    Raised only in strict mode; the default behaviour logs the failure and
    treats the file as empty.
    """

    def __init__(self, path, cause):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot read record file {path!r}: {cause}")


class MalformedRecordError(PyBloomDiffError, ValueError):
    """A record line does not carry four key tokens or has a bad triple."""

    def __init__(self, line, reason):
        self.line = line
        self.reason = reason
        super().__init__(f"Malformed record ({reason}): {line!r}")


class FrozenFilterError(PyBloomDiffError):
    """An element was added to a filter after its build phase ended."""
