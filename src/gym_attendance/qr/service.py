from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.clock import Clock
from ..core.exceptions import NotFoundError
from ..members.repository import MemberRepository
from .codec import QRCodec, QRPayload
from .render import render_data_uri, render_png


class MemberQRService:
    """Use case: issue the printable attendance QR code of a member."""

    def __init__(self, members: MemberRepository, codec: QRCodec, *, clock: Optional[Clock] = None):
        self._members = members
        self._codec = codec
        self._clock = clock or Clock()

    def payload_for(self, *, gym_id: str, member_code: str, now: Optional[datetime] = None) -> QRPayload:
        member = self._members.find_with_memberships(member_code, gym_id=gym_id)
        if member is None:
            raise NotFoundError(f'No active member "{member_code}" in this gym')
        return self._codec.encode_member(member, now=now or self._clock.now())

    def png_for(self, *, gym_id: str, member_code: str) -> bytes:
        return render_png(self.payload_for(gym_id=gym_id, member_code=member_code).to_json())

    def data_uri_for(self, *, gym_id: str, member_code: str) -> tuple[QRPayload, str]:
        payload = self.payload_for(gym_id=gym_id, member_code=member_code)
        return payload, render_data_uri(payload.to_json())
