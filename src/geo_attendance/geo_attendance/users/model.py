from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Profile consumed by the engine. Accounts themselves live with the identity provider."""

    user_id: int
    email: str
    name: str
    employee_id: Optional[str] = None
    normal_rate: float = 0.0
    ot_rate: float = 0.0
    is_admin: bool = False
    is_deleted: bool = False

    @property
    def role(self) -> Role:
        return Role.ADMIN if self.is_admin else Role.STAFF
