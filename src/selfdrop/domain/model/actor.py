"""Who is acting: the authenticated identity handed to the core."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from selfdrop.domain.exceptions import ValidationError


class Role(Enum):
    CUSTOMER = "CUSTOMER"
    OPERATOR = "OPERATOR"


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: Role

    def __post_init__(self) -> None:
        if not self.user_id or not self.user_id.strip():
            raise ValidationError("Actor user id is required")

    @staticmethod
    def customer(user_id: str) -> Actor:
        return Actor(user_id=user_id, role=Role.CUSTOMER)

    @staticmethod
    def operator(user_id: str) -> Actor:
        return Actor(user_id=user_id, role=Role.OPERATOR)
