"""
Queue views: statistics, token lookup and persisted snapshot.
"""

from pydantic import BaseModel, Field
from typing import List

from .department import Department, DepartmentName
from .patient import Patient


class QueueStats(BaseModel):
    """Aggregate figures for today's registrations."""
    total_patients: int = 0
    total_served_today: int = 0
    average_wait_time: int = Field(default=0, description="Whole minutes")
    busiest_department: DepartmentName


class PatientLookup(BaseModel):
    """Patient dashboard view for a token."""
    patient: Patient
    department: Department
    position: int = Field(..., ge=0, description="1-based queue position, 0 if not waiting")
    estimated_wait_minutes: int = 0


class QueueSnapshot(BaseModel):
    """Full engine state handed to a snapshot store."""
    patients: List[Patient] = []
    departments: List[Department] = []
