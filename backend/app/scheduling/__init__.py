from app.scheduling.appointment_conflicts import (
    AvailabilityMatch,
    check_within_availability,
    has_duplicate_same_day,
    is_within_availability,
)
from app.scheduling.availability_conflicts import check_slot_overlap, has_slot_overlap
from app.scheduling.decisions import Approved, Decision, Rejected
from app.scheduling.errors import (
    ConflictError,
    ConflictKind,
    ForbiddenError,
    NotFoundError,
    SchedulingError,
    StorageError,
    ValidationError,
)
from app.scheduling.intervals import contains, overlaps
from app.scheduling.orchestrator import SchedulingOrchestrator
from app.scheduling.records import (
    Actor,
    ActorRole,
    AppointmentRecord,
    AvailabilityType,
    DayOfWeek,
    LocationRecord,
    PartyRecord,
    RepeatType,
    SlotQuery,
    SlotRecord,
)
from app.scheduling.statuses import (
    INITIAL_STATUSES,
    TERMINAL_STATUSES,
    TRANSITIONS,
    AppointmentStatus,
    allowed_transitions,
    can_transition,
    is_initial,
    is_terminal,
)
from app.scheduling.store import SchedulingStore
from app.scheduling.times import is_valid_range, is_valid_time, parse_time
