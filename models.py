from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, ForeignKey
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Book(Base):
    __tablename__ = "books"
    __table_args__ = (CheckConstraint("stock >= 0", name="ck_books_stock_non_negative"),)

    id = Column(Integer, primary_key=True)
    code = Column(String, unique=True, nullable=False, index=True)
    title = Column(String, nullable=False)
    author = Column(String)
    stock = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Book(code={self.code}, stock={self.stock})>"


class Member(Base):
    __tablename__ = "members"
    __table_args__ = (CheckConstraint("borrowing >= 0", name="ck_members_borrowing_non_negative"),)

    id = Column(Integer, primary_key=True)
    code = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    # number of loans with no date_returned, recomputed on every borrow/return
    borrowing = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default="normal")

    borrowed_books = relationship("BorrowedBook", back_populates="member")
    penalties = relationship("Penalty", back_populates="member")

    def __repr__(self) -> str:
        return f"<Member(code={self.code}, borrowing={self.borrowing})>"


class BorrowedBook(Base):
    __tablename__ = "borrowed_books"

    id = Column(Integer, primary_key=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    date_borrowed = Column(DateTime, nullable=False)
    # null while the loan is active
    date_returned = Column(DateTime, nullable=True)

    member = relationship("Member", back_populates="borrowed_books")
    book = relationship("Book")

    @property
    def is_active(self) -> bool:
        return self.date_returned is None


class Penalty(Base):
    __tablename__ = "penalties"

    id = Column(Integer, primary_key=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)

    member = relationship("Member", back_populates="penalties")
