from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import MemberStatus
from .model import Member, MemberDetails


class MemberRepository(Protocol):
    """Member directory used by the attendance engine.

    ``gym_ids`` restricts a lookup to the tenants the caller operates in;
    ``None`` means every tenant the caller can see.
    """

    def find_by_code(self, member_code: str, *, gym_ids: Optional[Sequence[str]] = None) -> Optional[Member]:
        """Status-unfiltered lookup by human-readable code."""
        raise NotImplementedError

    def find_with_memberships(
        self,
        member_code: str,
        *,
        gym_id: str,
        status: MemberStatus = MemberStatus.ACTIVE,
    ) -> Optional[MemberDetails]:
        """Read-only enriched lookup; safe to repeat."""
        raise NotImplementedError
