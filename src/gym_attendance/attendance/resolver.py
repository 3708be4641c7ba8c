from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.exceptions import MemberInactive, MemberNotFound, TenantMismatch
from ..members.model import MemberDetails
from ..members.repository import MemberRepository
from ..qr.codec import QRCodec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanInput:
    member_code: str
    expected_gym_id: Optional[str] = None
    from_qr: bool = False


class MemberResolver:
    """Turn a scanned QR payload or typed member code into an active member.

    Existence and status are checked by a broad lookup first so a refusal can
    say *why* (unknown code vs. suspended account); only then is the full
    record with memberships loaded.
    """

    def __init__(self, members: MemberRepository, codec: QRCodec):
        self._members = members
        self._codec = codec

    def parse(self, raw: str) -> ScanInput:
        payload = self._codec.decode(raw)
        if payload is not None:
            return ScanInput(member_code=payload.member_code, expected_gym_id=payload.gym_id, from_qr=True)
        return ScanInput(member_code=raw.strip())

    def resolve(self, raw: str, *, gym_ids: Optional[Sequence[str]] = None) -> MemberDetails:
        scan = self.parse(raw)

        found = None
        if scan.expected_gym_id and gym_ids is None:
            # Unscoped scan: the gym printed on the code picks between equal codes.
            found = self._members.find_by_code(scan.member_code, gym_ids=[scan.expected_gym_id])
        if found is None:
            found = self._members.find_by_code(scan.member_code, gym_ids=gym_ids)
        if found is None:
            raise MemberNotFound(scan.member_code)

        if not found.is_active:
            raise MemberInactive(scan.member_code, found.status)

        if scan.expected_gym_id and str(found.gym_id) != scan.expected_gym_id:
            logger.warning(
                "QR gym mismatch for member %s: code issued for gym %s, member belongs to gym %s",
                scan.member_code,
                scan.expected_gym_id,
                found.gym_id,
            )
            raise TenantMismatch(scan.member_code, scan.expected_gym_id, str(found.gym_id))

        details = self._members.find_with_memberships(scan.member_code, gym_id=found.gym_id)
        if details is None:
            # Deactivated or removed between the two reads.
            raise MemberNotFound(scan.member_code)
        return details
