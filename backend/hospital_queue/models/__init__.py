"""Pydantic models for the queue tracker."""

from .department import Department, DepartmentName, default_departments
from .patient import (
    Patient,
    PatientCreate,
    PatientStatus,
    Gender,
    VisitType,
    Priority,
    SENIOR_CITIZEN_AGE
)
from .queue import QueueStats, PatientLookup, QueueSnapshot

__all__ = [
    # Department
    "Department", "DepartmentName", "default_departments",
    # Patient
    "Patient", "PatientCreate", "PatientStatus", "Gender", "VisitType",
    "Priority", "SENIOR_CITIZEN_AGE",
    # Queue
    "QueueStats", "PatientLookup", "QueueSnapshot"
]
