"""
Store interfaces used by the lending engine and the query service.

Each store exposes explicit lookups with documented predicates. A UnitOfWork
groups the three stores behind one transaction: nothing a store writes is
visible to other units of work until commit(), and leaving the context
without committing discards every write.
"""
from datetime import datetime
from typing import List, Optional, Protocol

from models import Book, BorrowedBook, Member, Penalty


class CatalogStore(Protocol):
    """Books and members, including their stock/borrowing counters."""

    def find_book(self, code: str, for_update: bool = False) -> Optional[Book]:
        """Book whose code matches, regardless of stock."""
        ...

    def find_book_in_stock(self, code: str, for_update: bool = False) -> Optional[Book]:
        """Book whose code matches and whose stock > 0."""
        ...

    def find_member(self, code: str, for_update: bool = False) -> Optional[Member]:
        ...

    def list_books(self, available_only: bool = False) -> List[Book]:
        ...

    def list_members(self) -> List[Member]:
        ...

    def adjust_stock(self, book: Book, delta: int) -> None:
        """Add delta to the book's stock; raises ConflictError if stock would go negative."""
        ...

    def set_borrowing(self, member: Member, borrowing: int) -> None:
        """
        Store the recomputed counter; raises ConflictError if the stored value
        is no longer the one read for the member.
        """
        ...


class LoanLedger(Protocol):
    """BorrowedBook records. A loan is active while date_returned is null."""

    def find_active_loan(self, member_id: int) -> Optional[BorrowedBook]:
        """Any active loan of the member, whatever the book."""
        ...

    def find_active_loan_for_book(self, member_id: int, book_id: int) -> Optional[BorrowedBook]:
        """The active loan of this member for this book."""
        ...

    def list_active_loans(self, member_id: int) -> List[BorrowedBook]:
        ...

    def count_active_loans(self, member_id: int) -> int:
        ...

    def open_loan(self, member_id: int, book_id: int, borrowed_at: datetime) -> BorrowedBook:
        ...

    def close_loan(self, loan: BorrowedBook, returned_at: datetime) -> None:
        ...


class PenaltyLedger(Protocol):
    """Penalty records. A penalty is active while end_date is after now."""

    def find_active_penalty(self, member_id: int, now: datetime) -> Optional[Penalty]:
        ...

    def issue_penalty(self, member_id: int, start_date: datetime, end_date: datetime) -> Penalty:
        ...


class UnitOfWork(Protocol):
    catalog: CatalogStore
    loans: LoanLedger
    penalties: PenaltyLedger

    def __enter__(self) -> "UnitOfWork":
        ...

    def __exit__(self, exc_type, exc, tb) -> None:
        ...

    def commit(self) -> None:
        ...
