"""
Borrow/return eligibility engine.

Every request runs inside its own unit of work: the eligibility checks and the
mutation set that follows them see the same transaction, and the mutation set
is committed as a whole or not at all.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

import config
from errors import LimitExceeded, NotFound, OutstandingLoan, Penalized
from logger import get_logger
from models import Book, BorrowedBook, Member
from stores import UnitOfWork

logger = get_logger(__name__)

BORROW_SUCCESS = "Book borrowed successfully"
RETURN_SUCCESS = "Book returned successfully"

BOOK_NOT_FOUND = "Book not found or out of stock"
MEMBER_NOT_FOUND = "Member not found"
LOAN_NOT_FOUND = "Borrowed book not found"


@dataclass(frozen=True)
class LendingPolicy:
    max_borrowing: int = config.MAX_BORROWING
    loan_period: timedelta = field(default_factory=lambda: timedelta(days=config.LOAN_PERIOD_DAYS))
    penalty_duration: timedelta = field(default_factory=lambda: timedelta(days=config.PENALTY_DAYS))

    def is_late(self, loan: BorrowedBook, returned_at: datetime) -> bool:
        return returned_at - loan.date_borrowed > self.loan_period


class LendingEngine:
    """
    Decides and executes borrow and return requests.

    Args:
        uow_factory: returns a fresh UnitOfWork per request
        policy: borrowing cap, loan period and penalty duration
        clock: returns the current time
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        policy: Optional[LendingPolicy] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._uow_factory = uow_factory
        self._policy = policy or LendingPolicy()
        self._clock = clock

    @property
    def policy(self) -> LendingPolicy:
        return self._policy

    def borrow(self, member_code: str, book_code: str) -> str:
        """
        Lend the book to the member.

        Checks run in a fixed order and the first failure is raised:
        book in stock, member exists, borrowing cap, outstanding loan, active penalty.

        Raises:
            NotFound, LimitExceeded, OutstandingLoan, Penalized
        """
        _require_codes(member_code, book_code)
        with self._uow_factory() as uow:
            now = self._clock()

            book = uow.catalog.find_book_in_stock(book_code, for_update=True)
            if not book:
                raise self._reject("borrow", member_code, book_code, NotFound(BOOK_NOT_FOUND))

            member = uow.catalog.find_member(member_code, for_update=True)
            if not member:
                raise self._reject("borrow", member_code, book_code, NotFound(MEMBER_NOT_FOUND))

            if member.borrowing >= self._policy.max_borrowing:
                raise self._reject("borrow", member_code, book_code, LimitExceeded())

            if uow.loans.find_active_loan(member.id):
                raise self._reject("borrow", member_code, book_code, OutstandingLoan())

            if uow.penalties.find_active_penalty(member.id, now):
                raise self._reject("borrow", member_code, book_code, Penalized())

            self._apply_borrow(uow, member, book, now)
            uow.commit()

        logger.info(f"Member {member_code} borrowed {book_code}")
        return BORROW_SUCCESS

    def return_book(self, member_code: str, book_code: str) -> str:
        """
        Close the member's active loan of the book and restore stock.
        A loan held longer than the loan period earns the member a penalty.

        Raises:
            NotFound
        """
        _require_codes(member_code, book_code)
        with self._uow_factory() as uow:
            now = self._clock()

            book = uow.catalog.find_book(book_code, for_update=True)
            if not book:
                raise self._reject("return", member_code, book_code, NotFound(BOOK_NOT_FOUND))

            member = uow.catalog.find_member(member_code, for_update=True)
            if not member:
                raise self._reject("return", member_code, book_code, NotFound(MEMBER_NOT_FOUND))

            loan = uow.loans.find_active_loan_for_book(member.id, book.id)
            if not loan:
                raise self._reject("return", member_code, book_code, NotFound(LOAN_NOT_FOUND))

            late = self._apply_return(uow, member, book, loan, now)
            uow.commit()

        if late:
            logger.info(f"Member {member_code} returned {book_code} late, penalty issued")
        else:
            logger.info(f"Member {member_code} returned {book_code}")
        # TODO: late returns share the on-time message until product settles on the penalty wording
        return RETURN_SUCCESS

    def _apply_borrow(self, uow: UnitOfWork, member: Member, book: Book, now: datetime) -> None:
        uow.loans.open_loan(member.id, book.id, now)
        uow.catalog.adjust_stock(book, -1)
        uow.catalog.set_borrowing(member, uow.loans.count_active_loans(member.id))

    def _apply_return(
        self, uow: UnitOfWork, member: Member, book: Book, loan: BorrowedBook, now: datetime
    ) -> bool:
        uow.loans.close_loan(loan, now)
        uow.catalog.adjust_stock(book, 1)
        uow.catalog.set_borrowing(member, uow.loans.count_active_loans(member.id))

        if not self._policy.is_late(loan, now):
            return False
        uow.penalties.issue_penalty(member.id, now, now + self._policy.penalty_duration)
        return True

    def _reject(self, action: str, member_code: str, book_code: str, error: Exception) -> Exception:
        logger.info(f"Rejected {action} of {book_code} by {member_code}: {error}")
        return error


def _require_codes(member_code: str, book_code: str) -> None:
    if not member_code or not book_code:
        raise ValueError("member_code and book_code are required")
