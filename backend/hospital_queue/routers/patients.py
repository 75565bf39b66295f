"""
Patient registration and completion API routes.
"""

from typing import Optional, List
from fastapi import APIRouter, status, Depends, Query

from ..exceptions import QueueError
from ..models.patient import Patient, PatientCreate, PatientStatus
from ..services.queue_service import QueueEngine
from .dependencies import get_engine, to_http_error

router = APIRouter(prefix="/patients", tags=["Patients"])


@router.post("", response_model=Patient, status_code=status.HTTP_201_CREATED)
async def register_patient(
    patient_data: PatientCreate,
    engine: QueueEngine = Depends(get_engine)
):
    """Register a patient and issue a department token."""
    try:
        return await engine.register_patient(patient_data)
    except QueueError as e:
        raise to_http_error(e)


@router.get("", response_model=List[Patient])
async def list_patients(
    department: Optional[str] = Query(None, description="Filter by department"),
    patient_status: Optional[PatientStatus] = Query(None, alias="status"),
    engine: QueueEngine = Depends(get_engine)
):
    """List patients in registration order."""
    try:
        return engine.get_patients(department=department, status=patient_status)
    except QueueError as e:
        raise to_http_error(e)


@router.get("/{patient_id}", response_model=Patient)
async def get_patient(
    patient_id: str,
    engine: QueueEngine = Depends(get_engine)
):
    """Get patient by ID."""
    try:
        return engine.get_patient(patient_id)
    except QueueError as e:
        raise to_http_error(e)


@router.post("/{patient_id}/complete", response_model=Patient)
async def complete_patient(
    patient_id: str,
    engine: QueueEngine = Depends(get_engine)
):
    """Mark the patient currently being served as completed."""
    try:
        return await engine.complete_patient(patient_id)
    except QueueError as e:
        raise to_http_error(e)
