from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Gym:
    """Tenant: the scoping boundary for members, memberships and attendance."""

    gym_id: str
    name: str
