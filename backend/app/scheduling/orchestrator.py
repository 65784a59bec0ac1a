"""Accept/reject decisions for appointment and availability mutations.

The orchestrator only reads through a :class:`SchedulingStore`; persisting an
approved value is left to the caller. Every public method returns an
``Approved`` or ``Rejected`` decision. ``StorageError`` is not a rejection and
propagates unchanged.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Type, TypeVar

from app.core.logging import get_logger
from app.scheduling import appointment_conflicts, availability_conflicts
from app.scheduling.appointment_conflicts import AvailabilityMatch
from app.scheduling.decisions import Approved, Decision, Rejected
from app.scheduling.errors import (
    ConflictError,
    ConflictKind,
    ForbiddenError,
    NotFoundError,
    SchedulingError,
    ValidationError,
)
from app.scheduling.records import (
    Actor,
    ActorRole,
    AppointmentRecord,
    AvailabilityType,
    DayOfWeek,
    RepeatType,
    SlotRecord,
)
from app.scheduling.statuses import AppointmentStatus, can_transition, is_initial
from app.scheduling.store import SchedulingStore
from app.scheduling.times import is_valid_range, is_valid_time

logger = get_logger(__name__)

CHIEF_COMPLAINT_MAX_LENGTH = 500

APPOINTMENT_PATCH_FIELDS: FrozenSet[str] = frozenset(
    {
        "patient_id",
        "provider_id",
        "date",
        "time",
        "location_id",
        "status",
        "chief_complaint",
        "is_emergency",
    }
)
# A null for these means "leave unchanged"; for the others it clears the value.
APPOINTMENT_REQUIRED_FIELDS: FrozenSet[str] = frozenset(
    {"patient_id", "provider_id", "date", "status", "is_emergency"}
)

AVAILABILITY_PATCH_FIELDS: FrozenSet[str] = frozenset(
    {
        "availability_type",
        "day_of_week",
        "start_time",
        "end_time",
        "location_id",
        "repeat_type",
        "is_active",
    }
)
AVAILABILITY_REQUIRED_FIELDS: FrozenSet[str] = frozenset(
    {"availability_type", "day_of_week", "start_time", "end_time", "repeat_type", "is_active"}
)

E = TypeVar("E")


def _coerce_enum(enum_type: Type[E], value: Any, code: str) -> E:
    try:
        return enum_type(value)  # type: ignore[call-arg]
    except ValueError as exc:
        raise ValidationError(code, message=f"Unsupported value: {value!r}") from exc


def _normalize_patch(
    patch: Mapping[str, Any],
    allowed: FrozenSet[str],
    required: FrozenSet[str],
) -> Dict[str, Any]:
    unknown = sorted(set(patch) - allowed)
    if unknown:
        raise ValidationError("UNKNOWN_FIELD", payload={"fields": unknown})
    changes: Dict[str, Any] = {}
    for key, value in patch.items():
        if value is None and key in required:
            continue
        if value == "" and key in {"time", "chief_complaint"}:
            value = None
        changes[key] = value
    return changes


class SchedulingOrchestrator:
    def __init__(
        self,
        store: SchedulingStore,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self._today = today

    # -- public operations -------------------------------------------------

    def create_appointment(self, candidate: AppointmentRecord) -> Decision[AppointmentRecord]:
        return self._decide("create_appointment", self._create_appointment, candidate)

    def update_appointment(
        self,
        appointment_id: int,
        patch: Mapping[str, Any],
        actor: Optional[Actor] = None,
    ) -> Decision[AppointmentRecord]:
        return self._decide(
            "update_appointment", self._update_appointment, appointment_id, patch, actor
        )

    def update_status(
        self,
        appointment_id: int,
        new_status: AppointmentStatus | str,
        actor: Optional[Actor] = None,
    ) -> Decision[AppointmentRecord]:
        return self._decide(
            "update_status", self._update_status, appointment_id, new_status, actor
        )

    def remove_appointment(
        self, appointment_id: int, actor: Optional[Actor] = None
    ) -> Decision[AppointmentRecord]:
        return self._decide("remove_appointment", self._load_owned_appointment, appointment_id, actor)

    def get_appointment(
        self, appointment_id: int, actor: Optional[Actor] = None
    ) -> Decision[AppointmentRecord]:
        return self._decide("get_appointment", self._load_owned_appointment, appointment_id, actor)

    def create_availability(self, candidate: SlotRecord) -> Decision[SlotRecord]:
        return self._decide("create_availability", self._create_availability, candidate)

    def update_availability(
        self,
        availability_id: int,
        patch: Mapping[str, Any],
        provider_scope: Optional[int] = None,
    ) -> Decision[SlotRecord]:
        return self._decide(
            "update_availability",
            self._update_availability,
            availability_id,
            patch,
            provider_scope,
        )

    def remove_availability(
        self, availability_id: int, provider_scope: Optional[int] = None
    ) -> Decision[SlotRecord]:
        return self._decide(
            "remove_availability", self._load_scoped_availability, availability_id, provider_scope
        )

    def get_availability(
        self, availability_id: int, provider_scope: Optional[int] = None
    ) -> Decision[SlotRecord]:
        return self._decide(
            "get_availability", self._load_scoped_availability, availability_id, provider_scope
        )

    # -- plumbing ------------------------------------------------------------

    def _decide(self, operation: str, func: Callable[..., Any], *args: Any) -> Decision[Any]:
        try:
            value = func(*args)
        except SchedulingError as exc:
            logger.info(
                "scheduling.rejected",
                operation=operation,
                kind=exc.kind,
                code=exc.code,
            )
            return Rejected(exc)
        logger.debug("scheduling.approved", operation=operation)
        return Approved(value)

    # -- appointments --------------------------------------------------------

    def _create_appointment(self, candidate: AppointmentRecord) -> AppointmentRecord:
        appointment_time = candidate.time or None
        status = _coerce_enum(
            AppointmentStatus, candidate.status or AppointmentStatus.SCHEDULED, "INVALID_STATUS"
        )

        self._ensure_not_past(candidate.date)
        if appointment_time is not None:
            self._ensure_time_format(appointment_time)
        if not is_initial(status):
            raise ValidationError(
                "INVALID_INITIAL_STATUS",
                message=f"Appointments cannot be created with status {status.value}",
            )
        self._ensure_chief_complaint(candidate.chief_complaint)
        self._ensure_patient(candidate.patient_id)
        self._ensure_provider(candidate.provider_id)
        if candidate.location_id is not None:
            self._ensure_location_assignment(candidate.provider_id, candidate.location_id)
        self._ensure_no_duplicate(candidate.patient_id, candidate.date)
        if appointment_time is not None:
            self._ensure_within_availability(
                candidate.provider_id, candidate.date, appointment_time, candidate.location_id
            )

        return replace(candidate, time=appointment_time, status=status)

    def _update_appointment(
        self,
        appointment_id: int,
        patch: Mapping[str, Any],
        actor: Optional[Actor],
    ) -> AppointmentRecord:
        current = self._load_owned_appointment(appointment_id, actor)
        changes = _normalize_patch(patch, APPOINTMENT_PATCH_FIELDS, APPOINTMENT_REQUIRED_FIELDS)

        if "status" in changes:
            changes["status"] = _coerce_enum(AppointmentStatus, changes["status"], "INVALID_STATUS")
            self._ensure_transition(current.status, changes["status"])

        merged = replace(current, **changes)

        if "time" in changes and merged.time is not None:
            self._ensure_time_format(merged.time)
        if "date" in changes:
            self._ensure_not_past(merged.date)
        if "chief_complaint" in changes:
            self._ensure_chief_complaint(merged.chief_complaint)
        if "patient_id" in changes:
            self._ensure_patient(merged.patient_id)
        if "provider_id" in changes:
            self._ensure_provider(merged.provider_id)
        if merged.location_id is not None and changes.keys() & {"location_id", "provider_id"}:
            self._ensure_location_assignment(merged.provider_id, merged.location_id)
        if changes.keys() & {"date", "patient_id"}:
            self._ensure_no_duplicate(merged.patient_id, merged.date, exclude_id=current.id)
        if merged.time is not None and changes.keys() & {"time", "date", "provider_id", "location_id"}:
            self._ensure_within_availability(
                merged.provider_id, merged.date, merged.time, merged.location_id
            )

        return merged

    def _update_status(
        self,
        appointment_id: int,
        new_status: AppointmentStatus | str,
        actor: Optional[Actor],
    ) -> AppointmentRecord:
        current = self._load_owned_appointment(appointment_id, actor)
        target = _coerce_enum(AppointmentStatus, new_status, "INVALID_STATUS")
        self._ensure_transition(current.status, target)
        if target == current.status:
            return current
        return replace(current, status=target)

    def _load_owned_appointment(
        self, appointment_id: int, actor: Optional[Actor]
    ) -> AppointmentRecord:
        appointment = self.store.load_appointment(appointment_id)
        if appointment is None:
            raise NotFoundError("APPOINTMENT_NOT_FOUND", message="Appointment not found")
        if actor is None or actor.role == ActorRole.ADMIN:
            return appointment
        if actor.role == ActorRole.PATIENT and appointment.patient_id != actor.actor_id:
            raise ForbiddenError(
                "CANNOT_MODIFY_OTHER_PATIENT",
                message="Patients can only access their own appointments",
            )
        if actor.role == ActorRole.PROVIDER and appointment.provider_id != actor.actor_id:
            raise ForbiddenError(
                "CANNOT_MODIFY_OTHER_PROVIDER",
                message="Providers can only access appointments assigned to them",
            )
        return appointment

    def _ensure_transition(self, current: AppointmentStatus, target: AppointmentStatus) -> None:
        if current == target:
            return
        if not can_transition(current, target):
            raise ConflictError(
                ConflictKind.INVALID_TRANSITION,
                message=f"Cannot change status from {current.value} to {target.value}",
                payload={"from": current.value, "to": target.value},
            )

    def _ensure_not_past(self, day: date) -> None:
        if day < self._today():
            raise ValidationError("PAST_DATE", message="Appointment date cannot be in the past")

    def _ensure_time_format(self, value: str) -> None:
        if not is_valid_time(value):
            raise ValidationError(
                "INVALID_TIME_FORMAT", message="Time must be in HH:MM format (24-hour)"
            )

    def _ensure_chief_complaint(self, value: Optional[str]) -> None:
        if value is not None and len(value) > CHIEF_COMPLAINT_MAX_LENGTH:
            raise ValidationError(
                "CHIEF_COMPLAINT_TOO_LONG",
                message=f"Chief complaint is limited to {CHIEF_COMPLAINT_MAX_LENGTH} characters",
            )

    def _ensure_patient(self, patient_id: int) -> None:
        patient = self.store.find_patient(patient_id)
        if patient is None:
            raise NotFoundError("PATIENT_NOT_FOUND", message="Patient not found")
        if patient.archived:
            raise ValidationError("ARCHIVED_PATIENT", message="Patient is archived")

    def _ensure_provider(self, provider_id: int, *, allow_archived: bool = False) -> None:
        provider = self.store.find_provider(provider_id)
        if provider is None:
            raise NotFoundError("PROVIDER_NOT_FOUND", message="Provider not found")
        if provider.archived and not allow_archived:
            raise ValidationError("ARCHIVED_PROVIDER", message="Provider is archived")

    def _ensure_location_active(self, location_id: int) -> None:
        location = self.store.find_location(location_id)
        if location is None:
            raise NotFoundError("LOCATION_NOT_FOUND", message="Location not found")
        if not location.is_active:
            raise ValidationError("INACTIVE_LOCATION", message="Location is not active")

    def _ensure_location_assignment(self, provider_id: int, location_id: int) -> None:
        self._ensure_location_active(location_id)
        if not self.store.find_active_availability(provider_id, None, location_id):
            raise ValidationError(
                "LOCATION_NOT_ASSIGNED",
                message="Provider has no active availability at this location",
            )

    def _ensure_no_duplicate(
        self, patient_id: int, day: date, exclude_id: Optional[int] = None
    ) -> None:
        if appointment_conflicts.has_duplicate_same_day(self.store, patient_id, day, exclude_id):
            raise ConflictError(
                ConflictKind.DUPLICATE_APPOINTMENT,
                message="Patient already has an appointment on this date",
                payload={"date": day.isoformat()},
            )

    def _ensure_within_availability(
        self,
        provider_id: int,
        day: date,
        appointment_time: str,
        location_id: Optional[int],
    ) -> None:
        match = appointment_conflicts.check_within_availability(
            self.store, provider_id, day, appointment_time, location_id
        )
        if match is AvailabilityMatch.NO_SLOTS:
            raise ConflictError(
                ConflictKind.PROVIDER_NOT_AVAILABLE,
                message="Provider has no availability on this day",
                payload={"day_of_week": DayOfWeek.from_date(day).value},
            )
        if match is AvailabilityMatch.OUTSIDE:
            raise ConflictError(
                ConflictKind.TIME_OUTSIDE_AVAILABILITY,
                message="Requested time is outside of the provider's availability",
                payload={"time": appointment_time},
            )

    # -- availability --------------------------------------------------------

    def _create_availability(self, candidate: SlotRecord) -> SlotRecord:
        slot = replace(
            candidate,
            availability_type=_coerce_enum(
                AvailabilityType, candidate.availability_type, "INVALID_AVAILABILITY_TYPE"
            ),
            day_of_week=_coerce_enum(DayOfWeek, candidate.day_of_week, "INVALID_DAY_OF_WEEK"),
            repeat_type=_coerce_enum(
                RepeatType, candidate.repeat_type or RepeatType.NONE, "INVALID_REPEAT_TYPE"
            ),
        )
        self._validate_slot(slot)
        return slot

    def _update_availability(
        self,
        availability_id: int,
        patch: Mapping[str, Any],
        provider_scope: Optional[int],
    ) -> SlotRecord:
        current = self._load_scoped_availability(availability_id, provider_scope)
        changes = _normalize_patch(patch, AVAILABILITY_PATCH_FIELDS, AVAILABILITY_REQUIRED_FIELDS)
        if "availability_type" in changes:
            changes["availability_type"] = _coerce_enum(
                AvailabilityType, changes["availability_type"], "INVALID_AVAILABILITY_TYPE"
            )
        if "day_of_week" in changes:
            changes["day_of_week"] = _coerce_enum(
                DayOfWeek, changes["day_of_week"], "INVALID_DAY_OF_WEEK"
            )
        if "repeat_type" in changes:
            changes["repeat_type"] = _coerce_enum(
                RepeatType, changes["repeat_type"], "INVALID_REPEAT_TYPE"
            )

        merged = replace(current, **changes)
        self._validate_slot(merged, exclude_id=current.id)
        return merged

    def _validate_slot(self, slot: SlotRecord, exclude_id: Optional[int] = None) -> None:
        if not (is_valid_time(slot.start_time) and is_valid_time(slot.end_time)):
            raise ValidationError("INVALID_TIME", message="Times must be in HH:MM format (24-hour)")
        if not is_valid_range(slot.start_time, slot.end_time):
            raise ValidationError(
                "END_TIME_BEFORE_START", message="End time must be after start time"
            )
        if slot.availability_type == AvailabilityType.OFFLINE and slot.location_id is None:
            raise ValidationError(
                "OFFLINE_REQUIRES_LOCATION", message="Offline availability requires a location"
            )
        if slot.availability_type == AvailabilityType.VIRTUAL and slot.location_id is not None:
            raise ValidationError(
                "VIRTUAL_NO_LOCATION", message="Virtual availability cannot have a location"
            )

        self._ensure_provider(slot.provider_id, allow_archived=True)
        if slot.location_id is not None:
            location = self.store.find_location(slot.location_id)
            if location is None:
                raise NotFoundError("LOCATION_NOT_FOUND", message="Location not found")
            if slot.is_active and not location.is_active:
                raise ValidationError("INACTIVE_LOCATION", message="Location is not active")

        if not slot.is_active:
            return
        overlapping = availability_conflicts.check_slot_overlap(self.store, slot, exclude_id)
        if overlapping:
            raise ConflictError(
                ConflictKind.SLOT_OVERLAP,
                message="Availability overlaps an existing slot",
                payload={"conflicting_ids": [item.id for item in overlapping]},
            )

    def _load_scoped_availability(
        self, availability_id: int, provider_scope: Optional[int]
    ) -> SlotRecord:
        slot = self.store.load_availability(availability_id)
        if slot is None:
            raise NotFoundError("AVAILABILITY_NOT_FOUND", message="Availability not found")
        if provider_scope is not None and slot.provider_id != provider_scope:
            raise ForbiddenError(
                "CANNOT_MODIFY_OTHER_PROVIDER",
                message="Providers can only manage their own availability",
            )
        return slot
