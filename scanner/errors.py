"""Errors returned by a constant scan."""


class ScanError(Exception):
    """Base class for scan failures."""


class NotFoundError(ScanError):
    """No constants of the requested type were found."""

    def __init__(self, type_name: str):
        super().__init__(f"no values defined for type {type_name}")
        self.type_name = type_name


class InternalInconsistencyError(ScanError):
    """The symbol information disagrees with the syntax.

    This means the package was not validly type-checked; the scan is
    abandoned rather than returning an incomplete list.
    """

    def __init__(self, name: str, detail: str):
        super().__init__(detail)
        self.name = name
        self.detail = detail
