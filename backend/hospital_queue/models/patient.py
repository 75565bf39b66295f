"""
Patient models.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from enum import Enum

from .department import DepartmentName


SENIOR_CITIZEN_AGE = 60


class Gender(str, Enum):
    """Patient gender."""
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class VisitType(str, Enum):
    """Reason for the visit."""
    NEW = "New"
    FOLLOW_UP = "Follow-up"
    EMERGENCY = "Emergency"


class PatientStatus(str, Enum):
    """Patient lifecycle states."""
    WAITING = "Waiting"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class Priority(int, Enum):
    """Queue precedence class, higher is served first."""
    REGULAR = 1
    SENIOR_CITIZEN = 2
    EMERGENCY = 3


class PatientCreate(BaseModel):
    """Registration input."""
    name: str = Field(..., min_length=1, max_length=100)
    age: int = Field(..., ge=1, le=120, strict=True, description="Age in years")
    gender: Gender
    department: DepartmentName
    visit_type: VisitType

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class Patient(BaseModel):
    """Registered patient."""
    id: str
    token_number: int = Field(..., ge=1)
    name: str
    age: int
    gender: Gender
    department: DepartmentName
    visit_type: VisitType
    registration_time: datetime
    status: PatientStatus = PatientStatus.WAITING
    is_emergency: bool
    is_senior_citizen: bool
    priority: int = Field(..., ge=1, le=3)
    called_time: Optional[datetime] = None
    completion_time: Optional[datetime] = None

    @classmethod
    def from_registration(
        cls,
        data: PatientCreate,
        patient_id: str,
        token_number: int,
        registration_time: datetime
    ) -> "Patient":
        """Build a Waiting patient, deriving emergency/senior flags and priority."""
        is_emergency = data.visit_type == VisitType.EMERGENCY
        is_senior_citizen = data.age >= SENIOR_CITIZEN_AGE

        if is_emergency:
            priority = Priority.EMERGENCY
        elif is_senior_citizen:
            priority = Priority.SENIOR_CITIZEN
        else:
            priority = Priority.REGULAR

        return cls(
            id=patient_id,
            token_number=token_number,
            name=data.name,
            age=data.age,
            gender=data.gender,
            department=data.department,
            visit_type=data.visit_type,
            registration_time=registration_time,
            status=PatientStatus.WAITING,
            is_emergency=is_emergency,
            is_senior_citizen=is_senior_citizen,
            priority=int(priority)
        )

    def queue_key(self):
        """Sort key for queue order: priority desc, then arrival."""
        return (-self.priority, self.registration_time, self.token_number)
