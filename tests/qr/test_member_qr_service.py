from __future__ import annotations

import json
from datetime import datetime

import pytest

from fakes import GYM_A, GYM_B, InMemoryMembers, make_member

from gym_attendance.core.exceptions import NotFoundError
from gym_attendance.qr.codec import QRCodec
from gym_attendance.qr.service import MemberQRService


def _service():
    members = InMemoryMembers([make_member("MEM001"), make_member("MEM002", status="suspended")])
    return MemberQRService(members, QRCodec())


def test_payload_for_active_member():
    payload = _service().payload_for(gym_id=GYM_A, member_code="MEM001", now=datetime(2026, 2, 1, 9, 0))

    assert payload.member_code == "MEM001"
    assert payload.name == "Alice Nguyen"
    assert payload.generated_at == "2026-02-01T09:00:00.000"


@pytest.mark.parametrize("gym_id,code", [(GYM_A, "MEM002"), (GYM_B, "MEM001"), (GYM_A, "NOPE")])
def test_payload_for_unknown_or_inactive_member(gym_id, code):
    with pytest.raises(NotFoundError):
        _service().payload_for(gym_id=gym_id, member_code=code)


def test_data_uri_for_returns_payload_and_image():
    payload, uri = _service().data_uri_for(gym_id=GYM_A, member_code="MEM001")

    assert json.loads(payload.to_json())["member_id"] == "MEM001"
    assert uri.startswith("data:image/png;base64,")
