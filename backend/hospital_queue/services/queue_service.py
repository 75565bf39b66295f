"""
Queue and token management service.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..config import get_settings
from ..database import SnapshotStore
from ..exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from ..models.department import Department, DepartmentName, default_departments
from ..models.patient import Patient, PatientCreate, PatientStatus
from ..models.queue import PatientLookup, QueueSnapshot, QueueStats

logger = logging.getLogger(__name__)


def resolve_department(value: Union[str, DepartmentName]) -> DepartmentName:
    """Map a department name or id (case-insensitive) to DepartmentName."""
    if isinstance(value, DepartmentName):
        return value
    if isinstance(value, str):
        for name in DepartmentName:
            if name.value.lower() == value.strip().lower():
                return name
    raise ValidationError(f"Unknown department: {value!r}", field="department")


class QueueEngine:
    """
    Owns the patient registry and department table.

    Mutations are serialized by an asyncio lock and followed by a snapshot
    save. A failed save is logged; the in-memory change is kept.
    """

    def __init__(
        self,
        store: SnapshotStore,
        clock: Callable[[], datetime] = datetime.now,
        average_service_minutes: Optional[int] = None
    ):
        self._store = store
        self._clock = clock
        if average_service_minutes is None:
            average_service_minutes = get_settings().AVERAGE_SERVICE_MINUTES
        self.average_service_minutes = average_service_minutes
        self._patients: Dict[str, Patient] = {}
        self._departments: Dict[DepartmentName, Department] = {
            d.name: d for d in default_departments()
        }
        self._lock = asyncio.Lock()

    # ========================
    # Lifecycle
    # ========================

    async def load(self) -> None:
        """Restore state from the store, falling back to empty defaults."""
        try:
            snapshot = await self._store.load()
        except PersistenceError as e:
            logger.warning(f"Snapshot load failed, starting empty: {e}")
            snapshot = None

        async with self._lock:
            self._patients = {}
            self._departments = {d.name: d for d in default_departments()}
            if snapshot is None:
                logger.info("No snapshot found, starting with empty queues")
                return

            for patient in snapshot.patients:
                self._patients[patient.id] = patient
            for dept in snapshot.departments:
                self._departments[dept.name] = dept.model_copy()
            for name in self._departments:
                self._sync_waiting_count(name)
                self._sync_serving(name)
            logger.info(f"Loaded snapshot with {len(self._patients)} patients")

    async def close(self) -> None:
        await self._store.close()

    def snapshot(self) -> QueueSnapshot:
        """Deep copy of the current state."""
        return QueueSnapshot(
            patients=list(self._patients.values()),
            departments=list(self._departments.values())
        ).model_copy(deep=True)

    async def _save(self) -> None:
        try:
            await self._store.save(self.snapshot())
        except PersistenceError as e:
            logger.error(f"Snapshot save failed, keeping in-memory state: {e}")

    # ========================
    # Mutations
    # ========================

    async def register_patient(
        self,
        data: Union[PatientCreate, Mapping]
    ) -> Patient:
        """Register a patient and assign the next token of their department."""
        registration = self._validate_registration(data)

        async with self._lock:
            department = registration.department
            token_number = sum(
                1 for p in self._patients.values() if p.department == department
            ) + 1

            patient = Patient.from_registration(
                registration,
                patient_id=uuid.uuid4().hex,
                token_number=token_number,
                registration_time=self._clock()
            )
            self._patients[patient.id] = patient

            self._sync_waiting_count(department)
            dept = self._departments[department]
            if dept.next_token is not None:
                dept.next_token = self._head_token(department)

            logger.info(
                f"Registered {patient.id} in {department.value} "
                f"token={token_number} priority={patient.priority}"
            )
            await self._save()
            return patient.model_copy()

    async def call_next_patient(
        self,
        department: Union[str, DepartmentName]
    ) -> Optional[Patient]:
        """Move the head of the department queue to In Progress."""
        name = resolve_department(department)

        async with self._lock:
            waiting = self._waiting(name)
            if not waiting:
                return None

            dept = self._departments[name]
            if dept.current_token is not None:
                raise ConflictError(
                    f"{name.value} is still serving token {dept.current_token}"
                )

            patient = waiting[0]
            patient.status = PatientStatus.IN_PROGRESS
            patient.called_time = self._clock()

            remaining = waiting[1:]
            dept.current_token = patient.token_number
            dept.next_token = remaining[0].token_number if remaining else None
            self._sync_waiting_count(name)

            logger.info(f"Called token {patient.token_number} in {name.value}")
            await self._save()
            return patient.model_copy()

    async def complete_patient(self, patient_id: str) -> Patient:
        """Mark an In Progress patient as Completed."""
        async with self._lock:
            patient = self._patients.get(patient_id)
            if patient is None:
                raise NotFoundError(f"Patient not found: {patient_id}")
            if patient.status != PatientStatus.IN_PROGRESS:
                raise ConflictError(
                    f"Patient {patient_id} is {patient.status.value}, not In Progress"
                )

            patient.status = PatientStatus.COMPLETED
            patient.completion_time = self._clock()

            dept = self._departments[patient.department]
            dept.total_served += 1
            if dept.current_token == patient.token_number:
                dept.current_token = None

            logger.info(
                f"Completed token {patient.token_number} in {patient.department.value}"
            )
            await self._save()
            return patient.model_copy()

    # ========================
    # Reads
    # ========================

    def get_waiting_patients(
        self,
        department: Union[str, DepartmentName]
    ) -> List[Patient]:
        """Waiting patients in queue order (priority desc, then arrival)."""
        name = resolve_department(department)
        return [p.model_copy() for p in self._waiting(name)]

    def get_departments(self) -> List[Department]:
        return [d.model_copy() for d in self._departments.values()]

    def get_department(self, department: Union[str, DepartmentName]) -> Department:
        return self._departments[resolve_department(department)].model_copy()

    def get_patient(self, patient_id: str) -> Patient:
        patient = self._patients.get(patient_id)
        if patient is None:
            raise NotFoundError(f"Patient not found: {patient_id}")
        return patient.model_copy()

    def get_patients(
        self,
        department: Optional[Union[str, DepartmentName]] = None,
        status: Optional[PatientStatus] = None
    ) -> List[Patient]:
        """All patients in registration order, optionally filtered."""
        name = resolve_department(department) if department is not None else None
        patients = sorted(self._patients.values(), key=lambda p: p.registration_time)
        return [
            p.model_copy() for p in patients
            if (name is None or p.department == name)
            and (status is None or p.status == status)
        ]

    def find_by_token(
        self,
        department: Union[str, DepartmentName],
        token_number: int
    ) -> Patient:
        name = resolve_department(department)
        for patient in self._patients.values():
            if patient.department == name and patient.token_number == token_number:
                return patient.model_copy()
        raise NotFoundError(f"Token {token_number} not found in {name.value}")

    def lookup(
        self,
        department: Union[str, DepartmentName],
        token_number: int
    ) -> PatientLookup:
        """Queue position and fixed-rate wait estimate for a token."""
        patient = self.find_by_token(department, token_number)
        position = 0
        for index, waiting in enumerate(self._waiting(patient.department), start=1):
            if waiting.id == patient.id:
                position = index
                break

        return PatientLookup(
            patient=patient,
            department=self.get_department(patient.department),
            position=position,
            estimated_wait_minutes=position * self.average_service_minutes
        )

    def get_queue_stats(self) -> QueueStats:
        """Totals for patients registered since local midnight."""
        now = self._clock()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)

        today_patients = [
            p for p in self._patients.values() if p.registration_time >= today
        ]
        completed_today = [
            p for p in today_patients if p.status == PatientStatus.COMPLETED
        ]

        average_wait = 0
        if completed_today:
            total_seconds = sum(
                ((p.completion_time or now) - p.registration_time).total_seconds()
                for p in completed_today
            )
            average_wait = round(total_seconds / len(completed_today) / 60)

        # max() keeps the first department on ties
        busiest = max(
            self._departments.values(),
            key=lambda d: d.total_served + d.waiting_count
        )

        return QueueStats(
            total_patients=len(today_patients),
            total_served_today=len(completed_today),
            average_wait_time=average_wait,
            busiest_department=busiest.name
        )

    # ========================
    # Helpers
    # ========================

    @staticmethod
    def _validate_registration(data: Union[PatientCreate, Mapping]) -> PatientCreate:
        if isinstance(data, BaseModel):
            data = data.model_dump()
        if not isinstance(data, Mapping):
            raise ValidationError("Registration data must be a mapping")
        try:
            return PatientCreate.model_validate(dict(data))
        except PydanticValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or None
            raise ValidationError(f"{field}: {error['msg']}", field=field) from e

    def _waiting(self, name: DepartmentName) -> List[Patient]:
        return sorted(
            (
                p for p in self._patients.values()
                if p.department == name and p.status == PatientStatus.WAITING
            ),
            key=Patient.queue_key
        )

    def _head_token(self, name: DepartmentName) -> Optional[int]:
        waiting = self._waiting(name)
        return waiting[0].token_number if waiting else None

    def _sync_waiting_count(self, name: DepartmentName) -> None:
        self._departments[name].waiting_count = len(self._waiting(name))

    def _sync_serving(self, name: DepartmentName) -> None:
        """Rebuild current/next token from the In Progress and Waiting patients."""
        dept = self._departments[name]
        serving = [
            p for p in self._patients.values()
            if p.department == name and p.status == PatientStatus.IN_PROGRESS
        ]
        if serving:
            latest = max(serving, key=lambda p: (p.called_time or p.registration_time, p.token_number))
            dept.current_token = latest.token_number
        else:
            dept.current_token = None
        if dept.current_token is not None or dept.next_token is not None:
            dept.next_token = self._head_token(name)
