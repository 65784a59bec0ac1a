from __future__ import annotations

from datetime import date

import pytest

from app.scheduling import (
    Actor,
    ActorRole,
    Approved,
    AppointmentRecord,
    AppointmentStatus,
    AvailabilityType,
    ConflictError,
    ConflictKind,
    DayOfWeek,
    ForbiddenError,
    NotFoundError,
    Rejected,
    SchedulingOrchestrator,
    SlotRecord,
    StorageError,
    ValidationError,
)

TODAY = date(2030, 1, 1)
MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)


@pytest.fixture
def clinic(store):
    store.add_patient(1)
    store.add_patient(2)
    store.add_patient(3, archived=True)
    store.add_provider(10)
    store.add_provider(11)
    store.add_provider(12, archived=True)
    store.add_location(100)
    store.add_location(101, is_active=False)
    store.add_slot(
        SlotRecord(
            id=None,
            provider_id=10,
            availability_type=AvailabilityType.OFFLINE,
            day_of_week=DayOfWeek.MONDAY,
            start_time="09:00",
            end_time="12:00",
            location_id=100,
        )
    )
    return store


@pytest.fixture
def orchestrator(clinic) -> SchedulingOrchestrator:
    return SchedulingOrchestrator(clinic, today=lambda: TODAY)


def _candidate(**overrides) -> AppointmentRecord:
    values = dict(id=None, patient_id=1, provider_id=10, date=MONDAY, time="10:00", location_id=100)
    values.update(overrides)
    return AppointmentRecord(**values)


def _slot(**overrides) -> SlotRecord:
    values = dict(
        id=None,
        provider_id=10,
        availability_type=AvailabilityType.OFFLINE,
        day_of_week=DayOfWeek.MONDAY,
        start_time="13:00",
        end_time="15:00",
        location_id=100,
    )
    values.update(overrides)
    return SlotRecord(**values)


def _rejection(decision) -> Exception:
    assert isinstance(decision, Rejected)
    assert not decision.ok
    return decision.error


# -- appointment creation ---------------------------------------------------


def test_create_appointment_within_availability(orchestrator) -> None:
    decision = orchestrator.create_appointment(_candidate())
    assert isinstance(decision, Approved)
    assert decision.ok
    assert decision.value.status == AppointmentStatus.SCHEDULED
    assert decision.value.time == "10:00"


def test_create_appointment_without_time_skips_availability(orchestrator) -> None:
    decision = orchestrator.create_appointment(_candidate(time=None, location_id=None, date=TUESDAY))
    assert decision.ok


def test_empty_time_is_treated_as_missing(orchestrator) -> None:
    decision = orchestrator.create_appointment(_candidate(time=""))
    assert decision.unwrap().time is None


@pytest.mark.parametrize(
    "overrides, error_type, code",
    [
        ({"date": date(2029, 12, 31)}, ValidationError, "PAST_DATE"),
        ({"time": "25:00"}, ValidationError, "INVALID_TIME_FORMAT"),
        ({"time": "10:00\n"}, ValidationError, "INVALID_TIME_FORMAT"),
        ({"status": AppointmentStatus.CONFIRMED}, ValidationError, "INVALID_INITIAL_STATUS"),
        ({"chief_complaint": "x" * 501}, ValidationError, "CHIEF_COMPLAINT_TOO_LONG"),
        ({"patient_id": 99}, NotFoundError, "PATIENT_NOT_FOUND"),
        ({"patient_id": 3}, ValidationError, "ARCHIVED_PATIENT"),
        ({"provider_id": 99}, NotFoundError, "PROVIDER_NOT_FOUND"),
        ({"provider_id": 12}, ValidationError, "ARCHIVED_PROVIDER"),
        ({"location_id": 999}, NotFoundError, "LOCATION_NOT_FOUND"),
        ({"location_id": 101}, ValidationError, "INACTIVE_LOCATION"),
        ({"provider_id": 11}, ValidationError, "LOCATION_NOT_ASSIGNED"),
    ],
)
def test_create_appointment_rejections(orchestrator, overrides, error_type, code) -> None:
    error = _rejection(orchestrator.create_appointment(_candidate(**overrides)))
    assert isinstance(error, error_type)
    assert error.code == code


def test_past_date_is_checked_before_anything_else(orchestrator, clinic) -> None:
    error = _rejection(
        orchestrator.create_appointment(_candidate(date=date(2029, 1, 1), patient_id=99, time="99:99"))
    )
    assert error.code == "PAST_DATE"
    assert clinic.calls == []


def test_today_is_not_in_the_past(orchestrator) -> None:
    decision = orchestrator.create_appointment(_candidate(date=TODAY, time=None, location_id=None))
    assert decision.ok


def test_pending_confirmation_is_a_valid_initial_status(orchestrator) -> None:
    decision = orchestrator.create_appointment(
        _candidate(status=AppointmentStatus.PENDING_CONFIRMATION)
    )
    assert decision.unwrap().status == AppointmentStatus.PENDING_CONFIRMATION


def test_duplicate_appointment_same_day_is_rejected(orchestrator, clinic) -> None:
    clinic.add_appointment(_candidate(time="09:00", status=AppointmentStatus.CANCELLED))
    error = _rejection(orchestrator.create_appointment(_candidate()))
    assert isinstance(error, ConflictError)
    assert error.conflict is ConflictKind.DUPLICATE_APPOINTMENT
    assert error.kind == "CONFLICT"


def test_duplicate_check_is_per_patient_and_day(orchestrator, clinic) -> None:
    clinic.add_appointment(_candidate(time="09:00"))
    assert orchestrator.create_appointment(_candidate(patient_id=2)).ok
    assert orchestrator.create_appointment(_candidate(date=TUESDAY, time=None, location_id=None)).ok


def test_provider_without_slots_that_day(orchestrator) -> None:
    error = _rejection(orchestrator.create_appointment(_candidate(date=TUESDAY, location_id=None)))
    assert error.conflict is ConflictKind.PROVIDER_NOT_AVAILABLE
    assert error.payload == {"day_of_week": "TUESDAY"}


def test_time_outside_availability(orchestrator) -> None:
    error = _rejection(orchestrator.create_appointment(_candidate(time="12:30")))
    assert error.conflict is ConflictKind.TIME_OUTSIDE_AVAILABILITY


def test_slot_end_time_is_bookable(orchestrator) -> None:
    assert orchestrator.create_appointment(_candidate(time="12:00")).ok


def test_unwrap_raises_the_rejection(orchestrator) -> None:
    with pytest.raises(NotFoundError):
        orchestrator.create_appointment(_candidate(patient_id=99)).unwrap()


def test_storage_failures_propagate_instead_of_rejecting(orchestrator, clinic, monkeypatch) -> None:
    def unavailable(*args, **kwargs):
        raise StorageError("find_patient")

    monkeypatch.setattr(clinic, "find_patient", unavailable)

    with pytest.raises(StorageError) as excinfo:
        orchestrator.create_appointment(_candidate())
    assert excinfo.value.operation == "find_patient"


# -- appointment updates ----------------------------------------------------


@pytest.fixture
def booked(clinic) -> AppointmentRecord:
    return clinic.add_appointment(_candidate())


def test_update_status_follows_lifecycle(orchestrator, booked) -> None:
    decision = orchestrator.update_status(booked.id, AppointmentStatus.CONFIRMED)
    assert decision.unwrap().status == AppointmentStatus.CONFIRMED


def test_update_status_rejects_skipping_steps(orchestrator, booked) -> None:
    error = _rejection(orchestrator.update_status(booked.id, "COMPLETED"))
    assert error.conflict is ConflictKind.INVALID_TRANSITION
    assert error.payload == {"from": "SCHEDULED", "to": "COMPLETED"}


def test_update_status_to_same_status_is_a_no_op(orchestrator, booked) -> None:
    decision = orchestrator.update_status(booked.id, AppointmentStatus.SCHEDULED)
    assert decision.unwrap() == booked


def test_update_status_rejects_unknown_status(orchestrator, booked) -> None:
    error = _rejection(orchestrator.update_status(booked.id, "ARCHIVED"))
    assert isinstance(error, ValidationError)
    assert error.code == "INVALID_STATUS"


def test_update_status_of_missing_appointment(orchestrator) -> None:
    error = _rejection(orchestrator.update_status(404, AppointmentStatus.CONFIRMED))
    assert isinstance(error, NotFoundError)
    assert error.code == "APPOINTMENT_NOT_FOUND"


def test_terminal_status_cannot_change(orchestrator, clinic) -> None:
    done = clinic.add_appointment(_candidate(status=AppointmentStatus.COMPLETED))
    for target in ("SCHEDULED", "CANCELLED", "CONFIRMED"):
        error = _rejection(orchestrator.update_status(done.id, target))
        assert error.conflict is ConflictKind.INVALID_TRANSITION


def test_patients_only_touch_their_own_appointments(orchestrator, booked) -> None:
    other = Actor(actor_id=2, role=ActorRole.PATIENT)
    error = _rejection(orchestrator.update_status(booked.id, "CANCELLED", other))
    assert isinstance(error, ForbiddenError)
    assert error.code == "CANNOT_MODIFY_OTHER_PATIENT"

    owner = Actor(actor_id=1, role=ActorRole.PATIENT)
    assert orchestrator.get_appointment(booked.id, owner).ok


def test_providers_only_touch_their_appointments(orchestrator, booked) -> None:
    other = Actor(actor_id=11, role=ActorRole.PROVIDER)
    error = _rejection(orchestrator.remove_appointment(booked.id, other))
    assert error.code == "CANNOT_MODIFY_OTHER_PROVIDER"
    admin = Actor(actor_id=None, role=ActorRole.ADMIN)
    assert orchestrator.remove_appointment(booked.id, admin).ok


def test_update_rechecks_availability_when_time_changes(orchestrator, booked) -> None:
    error = _rejection(orchestrator.update_appointment(booked.id, {"time": "15:00"}))
    assert error.conflict is ConflictKind.TIME_OUTSIDE_AVAILABILITY
    assert orchestrator.update_appointment(booked.id, {"time": "11:30"}).unwrap().time == "11:30"


def test_update_excludes_itself_from_duplicate_check(orchestrator, booked) -> None:
    decision = orchestrator.update_appointment(booked.id, {"date": MONDAY, "chief_complaint": "cough"})
    assert decision.unwrap().chief_complaint == "cough"


def test_update_moving_onto_a_booked_day(orchestrator, clinic, booked) -> None:
    clinic.add_appointment(_candidate(date=date(2030, 1, 14)))
    error = _rejection(orchestrator.update_appointment(booked.id, {"date": date(2030, 1, 14)}))
    assert error.conflict is ConflictKind.DUPLICATE_APPOINTMENT


def test_update_clears_optional_fields_with_null(orchestrator, booked) -> None:
    record = orchestrator.update_appointment(booked.id, {"time": None, "location_id": None}).unwrap()
    assert record.time is None
    assert record.location_id is None


def test_update_ignores_null_for_required_fields(orchestrator, booked) -> None:
    record = orchestrator.update_appointment(booked.id, {"patient_id": None, "status": None}).unwrap()
    assert record.patient_id == booked.patient_id
    assert record.status == booked.status


def test_update_rejects_unknown_fields(orchestrator, booked) -> None:
    error = _rejection(orchestrator.update_appointment(booked.id, {"room": "A"}))
    assert error.code == "UNKNOWN_FIELD"
    assert error.payload == {"fields": ["room"]}


def test_update_status_through_patch_is_validated(orchestrator, booked) -> None:
    error = _rejection(orchestrator.update_appointment(booked.id, {"status": "IN_PROGRESS"}))
    assert error.conflict is ConflictKind.INVALID_TRANSITION


# -- availability -----------------------------------------------------------


def test_create_availability(orchestrator) -> None:
    slot = orchestrator.create_availability(_slot(day_of_week="MONDAY")).unwrap()
    assert slot.day_of_week is DayOfWeek.MONDAY


@pytest.mark.parametrize(
    "overrides, code",
    [
        ({"start_time": "9:5"}, "INVALID_TIME"),
        ({"end_time": "24:00"}, "INVALID_TIME"),
        ({"start_time": "13:00\n"}, "INVALID_TIME"),
        ({"start_time": "15:00", "end_time": "13:00"}, "END_TIME_BEFORE_START"),
        ({"start_time": "13:00", "end_time": "13:00"}, "END_TIME_BEFORE_START"),
        ({"location_id": None}, "OFFLINE_REQUIRES_LOCATION"),
        ({"availability_type": AvailabilityType.VIRTUAL}, "VIRTUAL_NO_LOCATION"),
        ({"location_id": 101}, "INACTIVE_LOCATION"),
        ({"day_of_week": "FUNDAY"}, "INVALID_DAY_OF_WEEK"),
    ],
)
def test_create_availability_validation(orchestrator, overrides, code) -> None:
    error = _rejection(orchestrator.create_availability(_slot(**overrides)))
    assert isinstance(error, ValidationError)
    assert error.code == code


def test_create_availability_for_unknown_provider_or_location(orchestrator) -> None:
    assert _rejection(orchestrator.create_availability(_slot(provider_id=99))).code == "PROVIDER_NOT_FOUND"
    assert _rejection(orchestrator.create_availability(_slot(location_id=999))).code == "LOCATION_NOT_FOUND"


def test_archived_provider_may_keep_publishing_availability(orchestrator) -> None:
    assert orchestrator.create_availability(_slot(provider_id=12)).ok


def test_overlapping_offline_slot_is_rejected(orchestrator) -> None:
    error = _rejection(orchestrator.create_availability(_slot(start_time="11:00", end_time="13:00")))
    assert error.conflict is ConflictKind.SLOT_OVERLAP
    assert error.payload == {"conflicting_ids": [1]}


def test_offline_and_virtual_slots_may_overlap(orchestrator) -> None:
    virtual = _slot(
        availability_type=AvailabilityType.VIRTUAL,
        location_id=None,
        start_time="10:00",
        end_time="11:00",
    )
    assert orchestrator.create_availability(virtual).ok


def test_inactive_slot_skips_overlap_and_location_checks(orchestrator) -> None:
    draft = _slot(start_time="10:00", end_time="11:00", location_id=101, is_active=False)
    assert orchestrator.create_availability(draft).ok


def test_update_availability_excludes_itself(orchestrator) -> None:
    slot = orchestrator.update_availability(1, {"end_time": "12:30"}).unwrap()
    assert slot.end_time == "12:30"
    assert slot.id == 1


def test_update_availability_switch_to_virtual(orchestrator) -> None:
    slot = orchestrator.update_availability(
        1, {"availability_type": "VIRTUAL", "location_id": None}
    ).unwrap()
    assert slot.availability_type is AvailabilityType.VIRTUAL
    assert slot.location_id is None


def test_update_availability_revalidates_merged_slot(orchestrator) -> None:
    error = _rejection(orchestrator.update_availability(1, {"start_time": "12:30"}))
    assert error.code == "END_TIME_BEFORE_START"


def test_update_availability_into_an_overlap(orchestrator, clinic) -> None:
    clinic.add_slot(_slot())
    error = _rejection(orchestrator.update_availability(1, {"end_time": "14:00"}))
    assert error.conflict is ConflictKind.SLOT_OVERLAP
    assert error.payload == {"conflicting_ids": [2]}


def test_availability_is_scoped_to_its_provider(orchestrator) -> None:
    error = _rejection(orchestrator.update_availability(1, {"end_time": "12:30"}, provider_scope=11))
    assert isinstance(error, ForbiddenError)
    assert error.code == "CANNOT_MODIFY_OTHER_PROVIDER"
    assert orchestrator.get_availability(1, provider_scope=10).ok
    assert _rejection(orchestrator.remove_availability(1, provider_scope=11)).code == (
        "CANNOT_MODIFY_OTHER_PROVIDER"
    )


def test_missing_availability(orchestrator) -> None:
    error = _rejection(orchestrator.get_availability(404))
    assert isinstance(error, NotFoundError)
    assert error.code == "AVAILABILITY_NOT_FOUND"
