from __future__ import annotations

from typing import Protocol, Sequence

from .model import Gym


class GymRepository(Protocol):
    def list_all(self) -> Sequence[Gym]:
        raise NotImplementedError
