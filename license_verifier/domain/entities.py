from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from license_verifier.domain.errors import CodeAlreadyUsed


class BindingPolicy(str, Enum):
    MACHINE = "machine"
    SINGLE_USE = "single_use"


class VerificationOutcome(str, Enum):
    ACTIVATED = "activated"
    REVERIFIED = "reverified"


@dataclass
class VerificationCode:
    id: str
    code: str
    is_used: bool = False
    machine_id: str | None = None
    used_at: datetime | None = None

    def __post_init__(self):
        self.code = self.code.strip()
        if not self.code:
            raise ValueError("code cannot be empty")

    def activate(self, machine_id: str | None, when: datetime) -> None:
        if self.is_used:
            raise CodeAlreadyUsed()
        self.is_used = True
        self.machine_id = machine_id
        self.used_at = when

    def is_bound_to(self, machine_id: str | None) -> bool:
        return self.is_used and machine_id is not None and self.machine_id == machine_id
