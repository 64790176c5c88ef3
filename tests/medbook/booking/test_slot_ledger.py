from itertools import count

import pytest
from sqlalchemy import update

from medbook.booking.errors import (
    DoctorNotFoundError,
    SlotBookedError,
    SlotNotFoundError,
    SlotOverlapError,
    ValidationError,
)
from medbook.booking.locks import SlotLocks
from medbook.booking.slot_ledger import SlotLedger
from medbook.models.availability import AvailabilitySlot


@pytest.fixture
def ledger(store) -> SlotLedger:
    return SlotLedger(store, locks=SlotLocks(timeout=1), min_duration=15, max_duration=180, overlap_check=False)


def test_create_slot_starts_unbooked(ledger, clinic) -> None:
    slot = ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:00', '09:30', 30)

    assert slot.id is not None
    assert slot.doctor_id == clinic.doctor.id
    assert (slot.date, slot.start_time, slot.end_time, slot.duration_minutes) == ('2025-03-01', '09:00', '09:30', 30)
    assert slot.is_booked is False


def test_create_slot_uses_injected_ids(store, clinic) -> None:
    ids = count(500)
    ledger = SlotLedger(store, id_factory=lambda: next(ids))

    first = ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:00', '09:30', 30)
    second = ledger.create_slot(clinic.doctor.id, '2025-03-01', '10:00', '10:30', 30)

    assert (first.id, second.id) == (500, 501)


def test_create_slot_rejects_malformed_input(ledger, clinic) -> None:
    with pytest.raises(ValidationError):
        ledger.create_slot(clinic.doctor.id, '01-03-2025', '09:00', '09:30', 30)
    with pytest.raises(ValidationError):
        ledger.create_slot(clinic.doctor.id, '2025-03-01', '9am', '09:30', 30)
    with pytest.raises(ValidationError):
        ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:00', '09:30', 4)

    assert ledger.list_all(clinic.doctor.id) == []


def test_create_slot_requires_existing_doctor(ledger, clinic) -> None:
    with pytest.raises(DoctorNotFoundError):
        ledger.create_slot(9999, '2025-03-01', '09:00', '09:30', 30)


def test_overlapping_slots_are_allowed_by_default(ledger, clinic) -> None:
    ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:00', '09:30', 30)
    ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:00', '09:30', 30)

    assert len(ledger.list_all(clinic.doctor.id)) == 2


def test_overlap_check_rejects_overlapping_slot(store, clinic) -> None:
    ledger = SlotLedger(store, overlap_check=True)
    ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:00', '09:30', 30)

    with pytest.raises(SlotOverlapError):
        ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:15', '09:45', 30)

    ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:30', '10:00', 30)
    ledger.create_slot(clinic.other_doctor.id, '2025-03-01', '09:15', '09:45', 30)
    assert len(ledger.list_all(clinic.doctor.id)) == 2


def test_list_available_orders_by_date_then_time(ledger, clinic) -> None:
    ledger.create_slot(clinic.doctor.id, '2025-03-02', '08:00', '08:30', 30)
    ledger.create_slot(clinic.doctor.id, '2025-03-01', '14:00', '14:30', 30)
    ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:00', '09:30', 30)
    ledger.create_slot(clinic.doctor.id, '2025-03-01', '10:00', '10:30', 30)

    slots = ledger.list_available(clinic.doctor.id)

    assert [(slot.date, slot.start_time) for slot in slots] == [
        ('2025-03-01', '09:00'),
        ('2025-03-01', '10:00'),
        ('2025-03-01', '14:00'),
        ('2025-03-02', '08:00'),
    ]


def test_list_available_filters_booked_slots_and_date(ledger, clinic) -> None:
    booked = ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:00', '09:30', 30)
    free = ledger.create_slot(clinic.doctor.id, '2025-03-01', '10:00', '10:30', 30)
    ledger.create_slot(clinic.doctor.id, '2025-03-02', '10:00', '10:30', 30)
    ledger.mark_booked(booked.id)

    slots = ledger.list_available(clinic.doctor.id, '2025-03-01')

    assert [slot.id for slot in slots] == [free.id]


def test_list_available_hides_unapproved_doctor(ledger, clinic) -> None:
    ledger.create_slot(clinic.pending_doctor.id, '2025-03-01', '09:00', '09:30', 30)

    assert ledger.list_available(clinic.pending_doctor.id) == []
    assert len(ledger.list_all(clinic.pending_doctor.id)) == 1


def test_list_available_rejects_unknown_doctor(ledger, clinic) -> None:
    with pytest.raises(DoctorNotFoundError):
        ledger.list_available(9999)


def test_list_all_includes_booked_slots(ledger, clinic) -> None:
    slot = ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:00', '09:30', 30)
    ledger.mark_booked(slot.id)

    assert [s.is_booked for s in ledger.list_all(clinic.doctor.id)] == [True]


def test_mark_booked_and_unbooked_are_idempotent(ledger, clinic) -> None:
    slot = ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:00', '09:30', 30)

    assert ledger.mark_booked(slot.id) is True
    assert ledger.mark_booked(slot.id) is False
    assert ledger.get_slot(slot.id).is_booked is True
    assert ledger.mark_unbooked(slot.id) is True
    assert ledger.mark_unbooked(slot.id) is False
    assert ledger.get_slot(slot.id).is_booked is False


def test_mark_booked_requires_existing_slot(ledger, clinic) -> None:
    with pytest.raises(SlotNotFoundError):
        ledger.mark_booked(12345)
    with pytest.raises(SlotNotFoundError):
        ledger.mark_unbooked(12345)


def test_delete_slot_removes_unbooked_slot(ledger, clinic) -> None:
    slot = ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:00', '09:30', 30)
    slot_id = slot.id

    ledger.delete_slot(slot_id)

    with pytest.raises(SlotNotFoundError):
        ledger.get_slot(slot_id)


def test_delete_slot_refuses_booked_slot(ledger, clinic) -> None:
    slot = ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:00', '09:30', 30)
    ledger.mark_booked(slot.id)

    with pytest.raises(SlotBookedError):
        ledger.delete_slot(slot.id)

    assert ledger.get_slot(slot.id).is_booked is True


def test_delete_slot_reports_missing_slot(ledger, clinic) -> None:
    with pytest.raises(SlotNotFoundError):
        ledger.delete_slot(4242)


def test_find_inconsistencies_flags_booked_slot_without_appointment(ledger, clinic, db) -> None:
    slot = ledger.create_slot(clinic.doctor.id, '2025-03-01', '09:00', '09:30', 30)
    assert ledger.find_inconsistencies() == []

    db.execute(update(AvailabilitySlot).where(AvailabilitySlot.id == slot.id).values(is_booked=True))
    db.commit()

    assert ledger.find_inconsistencies() == [slot.id]
