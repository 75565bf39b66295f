"""
Department models.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum


class DepartmentName(str, Enum):
    """The fixed set of departments, in display order."""
    GENERAL = "General"
    DIAGNOSTICS = "Diagnostics"
    EMERGENCY = "Emergency"
    PHARMACY = "Pharmacy"


class Department(BaseModel):
    """Per-department serving state."""
    id: str
    name: DepartmentName
    current_token: Optional[int] = None
    next_token: Optional[int] = None
    total_served: int = Field(default=0, ge=0)
    waiting_count: int = Field(default=0, ge=0)


def default_departments() -> List[Department]:
    """Fresh department table with zero counts."""
    return [
        Department(id=name.value.lower(), name=name)
        for name in DepartmentName
    ]
