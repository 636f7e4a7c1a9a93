"""Read-only projections of members and books."""
from datetime import datetime
from typing import Callable, List

from engine import MEMBER_NOT_FOUND
from errors import NotFound
from schemas import BookOut, BorrowedBookOut, MemberDetail, MemberOut, PenaltyOut
from stores import UnitOfWork


class QueryService:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._uow_factory = uow_factory
        self._clock = clock

    def list_members(self) -> List[MemberOut]:
        with self._uow_factory() as uow:
            return [MemberOut.model_validate(m) for m in uow.catalog.list_members()]

    def get_member(self, code: str) -> MemberDetail:
        """
        Member summary with its active loans and active penalty (if any).

        Raises:
            NotFound: no member has this code
        """
        with self._uow_factory() as uow:
            member = uow.catalog.find_member(code)
            if not member:
                raise NotFound(MEMBER_NOT_FOUND)
            loans = uow.loans.list_active_loans(member.id)
            penalty = uow.penalties.find_active_penalty(member.id, self._clock())
            return MemberDetail(
                **MemberOut.model_validate(member).model_dump(),
                borrowedbooks=[BorrowedBookOut.model_validate(loan) for loan in loans],
                penalty=PenaltyOut.model_validate(penalty) if penalty else None,
            )

    def list_books(self, available_only: bool = False) -> List[BookOut]:
        with self._uow_factory() as uow:
            return [BookOut.model_validate(b) for b in uow.catalog.list_books(available_only)]
