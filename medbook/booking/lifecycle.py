"""Appointment state machine and its coupling to slot occupancy.

Booking holds the slot from the first (pending) status; only cancellation
gives it back. Each check-and-set runs under the slot's lock and inside one
store transaction, so either every write of a step lands or none does.
"""

import logging
from collections.abc import Callable

from medbook.booking.enums import AppointmentStatus, DoctorStatus, UserRole
from medbook.booking.errors import (
    AppointmentNotFoundError,
    DoctorNotApprovedError,
    DoctorNotFoundError,
    InvalidTransitionError,
    NotFoundError,
    SlotAlreadyBookedError,
    SlotNotFoundError,
    ValidationError,
)
from medbook.booking.locks import SlotLocks
from medbook.booking.policy import Actor, check_status_change, parse_status
from medbook.booking.slot_ledger import SlotLedger
from medbook.booking.store import BookingStore
from medbook.core import config

logger = logging.getLogger(__name__)


class AppointmentLifecycle:

    def __init__(
        self,
        store: BookingStore,
        ledger: SlotLedger,
        locks: SlotLocks | None = None,
        id_factory: Callable[[], int] | None = None,
        auto_confirm: bool | None = None,
    ):
        self.store = store
        self.ledger = ledger
        self.locks = ledger.locks if locks is None else locks
        self.id_factory = id_factory
        self.auto_confirm = config.AUTO_CONFIRM_BOOKINGS if auto_confirm is None else auto_confirm

    def create(self, patient_id: int, doctor_id: int, slot_id: int, reason: str | None = None):
        reason = self._clean_reason(reason)
        initial_status = AppointmentStatus.CONFIRMED if self.auto_confirm else AppointmentStatus.PENDING

        with self.locks.hold(slot_id):
            with self.store.transaction():
                slot = self.store.get_slot(slot_id)
                if slot is None:
                    raise SlotNotFoundError()
                if slot.doctor_id != doctor_id:
                    raise ValidationError('Slot does not belong to the selected doctor.')
                if slot.is_booked:
                    logger.warning('Slot %s already booked; rejecting patient %s', slot_id, patient_id)
                    raise SlotAlreadyBookedError()

                profile = self.store.get_doctor_profile(doctor_id)
                if profile is None:
                    raise DoctorNotFoundError()
                if profile.status != DoctorStatus.APPROVED.value:
                    raise DoctorNotApprovedError()
                patient = self.store.get_user(patient_id)
                if patient is None or patient.role != UserRole.PATIENT.value:
                    raise NotFoundError('Patient not found.')

                slot_date, start_time, end_time = slot.date, slot.start_time, slot.end_time

                if not self.ledger.mark_booked(slot_id):
                    raise SlotAlreadyBookedError()

                appointment = self.store.add_appointment(
                    patient_id=patient_id,
                    doctor_id=doctor_id,
                    slot_id=slot_id,
                    date=slot_date,
                    start_time=start_time,
                    end_time=end_time,
                    status=initial_status,
                    reason=reason,
                    appointment_id=self.id_factory() if self.id_factory else None,
                )

        logger.info(
            'Booked appointment %s: patient %s, doctor %s, slot %s (%s)',
            appointment.id,
            patient_id,
            doctor_id,
            slot_id,
            initial_status.value,
        )
        return appointment

    def get(self, appointment_id: int):
        appointment = self.store.get_appointment(appointment_id)
        if appointment is None:
            raise AppointmentNotFoundError()
        return appointment

    def set_status(self, appointment_id: int, new_status, actor: Actor):
        new_status = parse_status(new_status)
        slot_id = self.get(appointment_id).slot_id

        with self.locks.hold(slot_id):
            with self.store.transaction():
                appointment = self.get(appointment_id)
                current = AppointmentStatus(appointment.status)
                check_status_change(current, new_status, actor)

                if not self.store.update_appointment_status(appointment_id, current, new_status):
                    raise InvalidTransitionError('Appointment status changed meanwhile; reload and retry.')

                if new_status == AppointmentStatus.CANCELLED:
                    self._release_slot(slot_id, appointment_id)

        logger.info(
            'Appointment %s moved %s -> %s by %s %s',
            appointment_id,
            current.value,
            new_status.value,
            actor.role.value,
            actor.id,
        )
        return self.get(appointment_id)

    def _release_slot(self, slot_id: int, appointment_id: int) -> None:
        try:
            released = self.ledger.mark_unbooked(slot_id)
        except SlotNotFoundError:
            logger.warning('Slot %s of appointment %s no longer exists', slot_id, appointment_id)
            return
        if not released:
            logger.warning('Slot %s of appointment %s was already free', slot_id, appointment_id)

    def list_for_patient(self, patient_id: int, status=None) -> list:
        return self.store.list_appointments(patient_id=patient_id, status=self._status_filter(status))

    def list_for_doctor(self, doctor_id: int, status=None) -> list:
        return self.store.list_appointments(doctor_id=doctor_id, status=self._status_filter(status))

    def list_all(self, status=None) -> list:
        return self.store.list_appointments(status=self._status_filter(status))

    @staticmethod
    def _status_filter(status):
        return None if status is None else parse_status(status)

    @staticmethod
    def _clean_reason(reason: str | None) -> str | None:
        if reason is None:
            return None
        normalized = reason.strip()
        if not normalized:
            return None
        if len(normalized) > config.MAX_APPOINTMENT_REASON_LENGTH:
            raise ValidationError(
                f'Reason must be {config.MAX_APPOINTMENT_REASON_LENGTH} characters or fewer.'
            )
        return normalized
