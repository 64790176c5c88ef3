"""Authoritative record of which doctor time windows are open for booking."""

import logging
from collections import Counter
from collections.abc import Callable

from medbook.booking.enums import AppointmentStatus, DoctorStatus
from medbook.booking.errors import (
    DoctorNotFoundError,
    SlotBookedError,
    SlotNotFoundError,
    SlotOverlapError,
)
from medbook.booking.locks import SlotLocks
from medbook.booking.store import BookingStore
from medbook.booking.timeslots import normalize_date, validate_slot_window, windows_overlap
from medbook.core import config

logger = logging.getLogger(__name__)


class SlotLedger:
    """Creates, removes and flips availability slots.

    Authorization is the caller's job; the ledger only guards data shape and
    the booked-slot deletion rule.
    """

    def __init__(
        self,
        store: BookingStore,
        locks: SlotLocks | None = None,
        id_factory: Callable[[], int] | None = None,
        min_duration: int | None = None,
        max_duration: int | None = None,
        overlap_check: bool | None = None,
    ):
        self.store = store
        self.locks = SlotLocks(timeout=config.SLOT_LOCK_TIMEOUT_SECONDS) if locks is None else locks
        self.id_factory = id_factory
        self.min_duration = config.MIN_SLOT_DURATION_MINUTES if min_duration is None else min_duration
        self.max_duration = config.MAX_SLOT_DURATION_MINUTES if max_duration is None else max_duration
        self.overlap_check = config.SLOT_OVERLAP_CHECK if overlap_check is None else overlap_check

    def create_slot(self, doctor_id: int, date, start_time, end_time, duration):
        slot_date, start, end, duration = validate_slot_window(
            date,
            start_time,
            end_time,
            duration,
            min_duration=self.min_duration,
            max_duration=self.max_duration,
        )

        with self.store.transaction():
            if self.store.get_doctor_profile(doctor_id) is None:
                raise DoctorNotFoundError()

            if self.overlap_check:
                for existing in self.store.list_slots(doctor_id=doctor_id, date=slot_date):
                    if windows_overlap(start, end, existing.start_time, existing.end_time):
                        raise SlotOverlapError(
                            f'Slot overlaps {existing.start_time}-{existing.end_time} on {slot_date}.'
                        )

            slot = self.store.add_slot(
                doctor_id=doctor_id,
                date=slot_date,
                start_time=start,
                end_time=end,
                duration_minutes=duration,
                slot_id=self.id_factory() if self.id_factory else None,
            )

        logger.info('Created slot %s for doctor %s on %s %s-%s', slot.id, doctor_id, slot_date, start, end)
        return slot

    def get_slot(self, slot_id: int):
        slot = self.store.get_slot(slot_id)
        if slot is None:
            raise SlotNotFoundError()
        return slot

    def delete_slot(self, slot_id: int) -> None:
        with self.locks.hold(slot_id):
            with self.store.transaction():
                if self.store.delete_unbooked_slot(slot_id):
                    logger.info('Deleted slot %s', slot_id)
                    return
                if self.store.get_slot(slot_id) is None:
                    raise SlotNotFoundError()
                logger.warning('Refused to delete booked slot %s', slot_id)
                raise SlotBookedError()

    def mark_booked(self, slot_id: int) -> bool:
        """Return True if the slot flipped from free to booked."""
        return self._flip(slot_id, True)

    def mark_unbooked(self, slot_id: int) -> bool:
        """Return True if the slot flipped from booked to free."""
        return self._flip(slot_id, False)

    def _flip(self, slot_id: int, booked: bool) -> bool:
        with self.store.transaction():
            if self.store.set_slot_booked(slot_id, booked):
                return True
            if self.store.get_slot(slot_id) is None:
                raise SlotNotFoundError()
            return False

    def list_available(self, doctor_id: int, date=None) -> list:
        profile = self.store.get_doctor_profile(doctor_id)
        if profile is None:
            raise DoctorNotFoundError()
        if profile.status != DoctorStatus.APPROVED.value:
            return []

        slot_date = normalize_date(date) if date is not None else None
        return self.store.list_slots(doctor_id=doctor_id, date=slot_date, is_booked=False)

    def list_all(self, doctor_id: int) -> list:
        return self.store.list_slots(doctor_id=doctor_id)

    def find_inconsistencies(self) -> list[int]:
        """Ids of slots whose booked flag disagrees with their live appointments."""
        live = Counter(
            appointment.slot_id
            for appointment in self.store.list_appointments()
            if appointment.status != AppointmentStatus.CANCELLED.value
        )
        broken = []
        for slot in self.store.list_slots():
            holders = live.get(slot.id, 0)
            if holders > 1 or slot.is_booked != (holders == 1):
                broken.append(slot.id)
        return broken
