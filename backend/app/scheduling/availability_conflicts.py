from __future__ import annotations

from typing import Iterable, List, Optional

from app.scheduling.intervals import overlaps
from app.scheduling.records import AvailabilityType, SlotQuery, SlotRecord
from app.scheduling.store import SchedulingStore


def comparable_slots_query(candidate: SlotRecord, exclude_id: Optional[int] = None) -> SlotQuery:
    """Build the lookup for slots a candidate may collide with.

    OFFLINE slots only compete with OFFLINE slots at the same location, VIRTUAL
    slots with every other VIRTUAL slot of the provider. OFFLINE and VIRTUAL
    never compete.
    """
    location_id = (
        candidate.location_id if candidate.availability_type == AvailabilityType.OFFLINE else None
    )
    return SlotQuery(
        provider_id=candidate.provider_id,
        day_of_week=candidate.day_of_week,
        availability_type=candidate.availability_type,
        location_id=location_id,
        is_active=True,
        exclude_id=exclude_id,
    )


def _is_comparable(candidate: SlotRecord, other: SlotRecord, exclude_id: Optional[int]) -> bool:
    if exclude_id is not None and other.id == exclude_id:
        return False
    if not other.is_active:
        return False
    if other.provider_id != candidate.provider_id or other.day_of_week != candidate.day_of_week:
        return False
    if other.availability_type != candidate.availability_type:
        return False
    if candidate.availability_type == AvailabilityType.OFFLINE:
        return other.location_id == candidate.location_id
    return True


def find_overlapping_slots(
    candidate: SlotRecord,
    existing: Iterable[SlotRecord],
    exclude_id: Optional[int] = None,
) -> List[SlotRecord]:
    return [
        slot
        for slot in existing
        if _is_comparable(candidate, slot, exclude_id)
        and overlaps(candidate.start_time, candidate.end_time, slot.start_time, slot.end_time)
    ]


def has_slot_overlap(
    candidate: SlotRecord,
    existing: Iterable[SlotRecord],
    exclude_id: Optional[int] = None,
) -> bool:
    return bool(find_overlapping_slots(candidate, existing, exclude_id))


def check_slot_overlap(
    store: SchedulingStore,
    candidate: SlotRecord,
    exclude_id: Optional[int] = None,
) -> List[SlotRecord]:
    """Return the stored slots that the candidate would overlap."""
    existing = store.find_availability_slots(comparable_slots_query(candidate, exclude_id))
    # The rules are re-applied in memory so a loose store filter cannot widen them.
    return find_overlapping_slots(candidate, existing, exclude_id)
