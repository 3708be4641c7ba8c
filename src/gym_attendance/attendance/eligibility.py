from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ..core.exceptions import NoActiveMembership
from ..members.model import MemberDetails, Membership


def select_membership(memberships: Iterable[Membership], today: date) -> Optional[Membership]:
    """Pick the membership a check-in is recorded against.

    Only memberships with status ``active`` and ``end_date >= today`` qualify.
    With overlapping packages the latest ``start_date`` wins, then the latest ``end_date``.
    """

    current = [m for m in memberships if m.is_current(today)]
    if not current:
        return None
    return max(current, key=lambda m: (m.start_date, m.end_date))


def require_membership(member: MemberDetails, today: date) -> Membership:
    membership = select_membership(member.memberships, today)
    if membership is None:
        raise NoActiveMembership(member=member)
    return membership
