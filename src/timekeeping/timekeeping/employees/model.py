from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Read model of an employee; records are managed outside this core."""

    employee_id: int
    full_name: str
    department_id: Optional[int]
    identity_token: Optional[str]
    is_active: bool = True
