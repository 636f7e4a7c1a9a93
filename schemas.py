from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OrmModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class LendingRequest(BaseModel):
    member_code: str = Field(..., min_length=1)
    book_code: str = Field(..., min_length=1)

    @field_validator("member_code", "book_code")
    @classmethod
    def strip_code(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class MessageResponse(BaseModel):
    message: str


class BookOut(OrmModel):
    id: int
    code: str
    title: str
    author: Optional[str] = None
    stock: int


class MemberOut(OrmModel):
    id: int
    code: str
    name: str
    borrowing: int
    status: str


class BorrowedBookOut(OrmModel):
    id: int
    book_id: int
    date_borrowed: datetime
    date_returned: Optional[datetime] = None


class PenaltyOut(OrmModel):
    id: int
    start_date: datetime
    end_date: datetime


class MemberDetail(MemberOut):
    borrowedbooks: List[BorrowedBookOut] = []
    penalty: Optional[PenaltyOut] = None
