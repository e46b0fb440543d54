"""Engine errors."""


class TaxonomyError(Exception):
    """Base error for the taxonomy engine."""

    def __init__(self, message: str = "Taxonomy error"):
        self.message = message
        super().__init__(self.message)


class ValidationError(TaxonomyError):
    """Bad input. Collected per record during bulk import."""

    def __init__(self, code: str, message: str | None = None):
        self.code = code
        super().__init__(message or code)


class StoreUnavailableError(TaxonomyError):
    """Term store or shared cache failure."""

    def __init__(self, message: str = "Term store unavailable"):
        super().__init__(message)


class CycleDetectedError(TaxonomyError):
    """A term is reachable from itself through its parent chain."""

    def __init__(self, path: list[int]):
        self.path = path
        super().__init__(f"Parent cycle detected: {' -> '.join(str(i) for i in path)}")
