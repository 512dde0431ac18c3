"""
Exception hierarchy for async-futureutils.
"""


class FutureUtilsError(Exception):
    """Base exception for all async-futureutils errors."""

    pass


class UnsupportedResultError(FutureUtilsError, TypeError):
    """Raised when an object does not support completion registration."""

    def __init__(self, result: object):
        self.result = result
        super().__init__(
            f"{type(result).__name__} does not support completion registration; "
            "register an adapter with register_completion_adapter()"
        )
