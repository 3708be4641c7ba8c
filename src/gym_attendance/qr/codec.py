"""Member QR payload: the JSON carried by printed attendance codes.

Wire shape (printed codes must keep scanning across versions)::

    {"type": "gym_attendance", "member_id": "<code>", "gym_id": "<gym id>",
     "name": "<display name>", "generated_at": "<ISO-8601>"}

With a signing secret configured an extra ``"sig"`` field is appended
(hex HMAC-SHA256 of the five fields above in canonical JSON form).
Decoders ignore fields they do not know.
"""
from __future__ import annotations

import hashlib
import hmac
import json
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from ..core.constants import QR_PAYLOAD_TYPE, QR_SIGNATURE_FIELD
from ..members.model import MemberDetails


def format_generated_at(now: datetime) -> str:
    if now.tzinfo is None:
        return now.isoformat(timespec="milliseconds")
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class QRPayload:
    member_code: str
    gym_id: Optional[str]
    name: str
    generated_at: str
    signature: Optional[str] = None

    def fields(self) -> dict:
        return {
            "type": QR_PAYLOAD_TYPE,
            "member_id": self.member_code,
            "gym_id": self.gym_id,
            "name": self.name,
            "generated_at": self.generated_at,
        }

    def to_dict(self) -> dict:
        data = self.fields()
        if self.signature:
            data[QR_SIGNATURE_FIELD] = self.signature
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


class QRCodec:
    def __init__(self, *, secret: Optional[str] = None, require_signature: bool = False):
        self._secret = secret.encode("utf-8") if secret else None
        self._require_signature = bool(require_signature)

    def _sign(self, fields: dict) -> Optional[str]:
        if not self._secret:
            return None
        canonical = json.dumps(fields, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
        return hmac.new(self._secret, canonical.encode("utf-8"), hashlib.sha256).hexdigest()

    def encode(self, *, member_code: str, gym_id: str, display_name: str, now: datetime) -> QRPayload:
        unsigned = QRPayload(
            member_code=str(member_code),
            gym_id=str(gym_id),
            name=display_name,
            generated_at=format_generated_at(now),
        )
        return replace(unsigned, signature=self._sign(unsigned.fields()))

    def encode_member(self, member: MemberDetails, *, now: datetime) -> QRPayload:
        return self.encode(
            member_code=member.member_code,
            gym_id=member.gym_id,
            display_name=member.profile.display_name,
            now=now,
        )

    def decode(self, raw: str) -> Optional[QRPayload]:
        """Return the payload, or None when ``raw`` is not a (valid) member QR payload.

        None is not an error: the caller treats the input as a typed member code.
        """

        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return None

        if not isinstance(data, dict) or data.get("type") != QR_PAYLOAD_TYPE:
            return None

        member_code = data.get("member_id")
        if member_code is None or str(member_code).strip() == "":
            return None

        gym_id = data.get("gym_id")
        payload = QRPayload(
            member_code=str(member_code).strip(),
            gym_id=str(gym_id) if gym_id not in (None, "") else None,
            name=str(data.get("name") or ""),
            generated_at=str(data.get("generated_at") or ""),
            signature=data.get(QR_SIGNATURE_FIELD) or None,
        )

        if not self._signature_ok(data, payload):
            return None
        return payload

    def _signature_ok(self, data: dict, payload: QRPayload) -> bool:
        if payload.signature is None:
            return not (self._secret and self._require_signature)
        if not self._secret:
            # Cannot verify without a key; the directory lookup remains the check.
            return True

        # Sign exactly what was printed, not the normalised values.
        printed = {k: data.get(k) for k in ("type", "member_id", "gym_id", "name", "generated_at")}
        expected = self._sign(printed)
        # Bytes comparison: a scanned sig may hold any characters.
        return hmac.compare_digest(expected.encode("ascii"), str(payload.signature).encode("utf-8", "replace"))
