"""Error kinds raised by the lending engine and its stores."""


class LibraryError(Exception):
    """
    Business-rule failure. Carries the caller-visible message and HTTP status.
    """
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(LibraryError):
    """A member, book or loan lookup came back empty."""
    status_code = 404


class LimitExceeded(LibraryError):
    """The member already holds the maximum number of books."""

    def __init__(self, message: str = "You have reached the maximum limit of borrowing"):
        super().__init__(message)


class OutstandingLoan(LibraryError):
    """The member has a book that has not been returned."""

    def __init__(self, message: str = "You have a book that has not been returned"):
        super().__init__(message)


class Penalized(LibraryError):
    """The member is inside an active penalty window."""

    def __init__(self, message: str = "You have penalty"):
        super().__init__(message)


class StoreError(Exception):
    """
    Raised when the persistence layer cannot complete a unit of work.
    Never carries a business message.
    """


class ConflictError(StoreError):
    """A guarded update lost against a concurrent transaction."""
