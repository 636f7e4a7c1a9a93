"""SQLAlchemy implementations of the store interfaces."""
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from errors import ConflictError, StoreError
from models import Book, BorrowedBook, Member, Penalty


class SqlCatalogStore:
    def __init__(self, session: Session):
        self._session = session

    def _books(self, for_update: bool):
        query = self._session.query(Book)
        return query.with_for_update() if for_update else query

    def find_book(self, code: str, for_update: bool = False) -> Optional[Book]:
        return self._books(for_update).filter(Book.code == code).first()

    def find_book_in_stock(self, code: str, for_update: bool = False) -> Optional[Book]:
        return self._books(for_update).filter(Book.code == code, Book.stock > 0).first()

    def find_member(self, code: str, for_update: bool = False) -> Optional[Member]:
        query = self._session.query(Member).filter(Member.code == code)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def list_books(self, available_only: bool = False) -> List[Book]:
        query = self._session.query(Book)
        if available_only:
            query = query.filter(Book.stock > 0)
        return query.order_by(Book.code).all()

    def list_members(self) -> List[Member]:
        return self._session.query(Member).order_by(Member.code).all()

    def adjust_stock(self, book: Book, delta: int) -> None:
        result = self._session.execute(
            update(Book)
            .where(Book.id == book.id, Book.stock + delta >= 0)
            .values(stock=Book.stock + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError(f"stock of book {book.code} changed concurrently")
        self._session.refresh(book, ["stock"])

    def set_borrowing(self, member: Member, borrowing: int) -> None:
        # succeeds only if the counter still holds the value this unit of work checked
        result = self._session.execute(
            update(Member)
            .where(Member.id == member.id, Member.borrowing == member.borrowing)
            .values(borrowing=borrowing)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError(f"borrowing of member {member.code} changed concurrently")
        self._session.refresh(member, ["borrowing"])


class SqlLoanLedger:
    def __init__(self, session: Session):
        self._session = session

    def _active(self, member_id: int):
        return self._session.query(BorrowedBook).filter(
            BorrowedBook.member_id == member_id,
            BorrowedBook.date_returned.is_(None),
        )

    def find_active_loan(self, member_id: int) -> Optional[BorrowedBook]:
        return self._active(member_id).first()

    def find_active_loan_for_book(self, member_id: int, book_id: int) -> Optional[BorrowedBook]:
        return self._active(member_id).filter(BorrowedBook.book_id == book_id).first()

    def list_active_loans(self, member_id: int) -> List[BorrowedBook]:
        return self._active(member_id).order_by(BorrowedBook.date_borrowed).all()

    def count_active_loans(self, member_id: int) -> int:
        return (
            self._session.query(func.count(BorrowedBook.id))
            .filter(BorrowedBook.member_id == member_id, BorrowedBook.date_returned.is_(None))
            .scalar()
        )

    def open_loan(self, member_id: int, book_id: int, borrowed_at: datetime) -> BorrowedBook:
        loan = BorrowedBook(member_id=member_id, book_id=book_id, date_borrowed=borrowed_at)
        self._session.add(loan)
        self._session.flush()
        return loan

    def close_loan(self, loan: BorrowedBook, returned_at: datetime) -> None:
        loan.date_returned = returned_at
        self._session.flush()


class SqlPenaltyLedger:
    def __init__(self, session: Session):
        self._session = session

    def find_active_penalty(self, member_id: int, now: datetime) -> Optional[Penalty]:
        return (
            self._session.query(Penalty)
            .filter(Penalty.member_id == member_id, Penalty.end_date > now)
            .order_by(Penalty.end_date.desc())
            .first()
        )

    def issue_penalty(self, member_id: int, start_date: datetime, end_date: datetime) -> Penalty:
        penalty = Penalty(member_id=member_id, start_date=start_date, end_date=end_date)
        self._session.add(penalty)
        self._session.flush()
        return penalty


class SqlUnitOfWork:
    """
    One session and one transaction. Commit explicitly; anything else rolls back.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self._session: Optional[Session] = None

    def __enter__(self) -> "SqlUnitOfWork":
        self._session = self._session_factory()
        self.catalog = SqlCatalogStore(self._session)
        self.loans = SqlLoanLedger(self._session)
        self.penalties = SqlPenaltyLedger(self._session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self._session.rollback()
        finally:
            self._session.close()
            self._session = None

    def commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise StoreError("could not commit unit of work") from e
