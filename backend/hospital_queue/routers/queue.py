"""
Department queue and statistics API routes.
"""

from typing import Optional, List
from fastapi import APIRouter, Depends

from ..exceptions import QueueError
from ..models.department import Department
from ..models.patient import Patient
from ..models.queue import PatientLookup, QueueStats
from ..services.queue_service import QueueEngine
from .dependencies import get_engine, to_http_error

router = APIRouter(tags=["Queue & Tokens"])


@router.get("/departments", response_model=List[Department])
async def list_departments(engine: QueueEngine = Depends(get_engine)):
    """Serving state of every department, for display boards."""
    return engine.get_departments()


@router.get("/departments/{department}", response_model=Department)
async def get_department(
    department: str,
    engine: QueueEngine = Depends(get_engine)
):
    try:
        return engine.get_department(department)
    except QueueError as e:
        raise to_http_error(e)


@router.get("/departments/{department}/waiting", response_model=List[Patient])
async def get_waiting_patients(
    department: str,
    engine: QueueEngine = Depends(get_engine)
):
    """Waiting patients in queue order."""
    try:
        return engine.get_waiting_patients(department)
    except QueueError as e:
        raise to_http_error(e)


@router.post("/departments/{department}/call-next", response_model=Optional[Patient])
async def call_next_patient(
    department: str,
    engine: QueueEngine = Depends(get_engine)
):
    """Call the next patient; returns null when nobody is waiting."""
    try:
        return await engine.call_next_patient(department)
    except QueueError as e:
        raise to_http_error(e)


@router.get("/departments/{department}/tokens/{token_number}", response_model=PatientLookup)
async def lookup_token(
    department: str,
    token_number: int,
    engine: QueueEngine = Depends(get_engine)
):
    """Queue position and estimated wait for a token (e.g., General #4)."""
    try:
        return engine.lookup(department, token_number)
    except QueueError as e:
        raise to_http_error(e)


@router.get("/stats", response_model=QueueStats)
async def get_queue_stats(engine: QueueEngine = Depends(get_engine)):
    """Today's queue statistics."""
    return engine.get_queue_stats()
