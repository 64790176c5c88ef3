"""Public booking operations with role and ownership checks.

The coordinator keeps no state of its own. It resolves who the actor is in
relation to the slot or appointment, then delegates to the slot ledger and
the appointment lifecycle.
"""

from collections.abc import Callable

from medbook.booking.enums import AppointmentStatus, UserRole
from medbook.booking.errors import (
    DoctorNotFoundError,
    ForbiddenTransitionError,
    ValidationError,
)
from medbook.booking.lifecycle import AppointmentLifecycle
from medbook.booking.locks import SlotLocks
from medbook.booking.policy import Actor, check_status_change, parse_status
from medbook.booking.slot_ledger import SlotLedger
from medbook.booking.store import BookingStore
from medbook.core import config


class BookingCoordinator:

    def __init__(
        self,
        store: BookingStore,
        locks: SlotLocks | None = None,
        slot_id_factory: Callable[[], int] | None = None,
        appointment_id_factory: Callable[[], int] | None = None,
        ledger_options: dict | None = None,
        auto_confirm: bool | None = None,
    ):
        if locks is None:
            locks = SlotLocks(timeout=config.SLOT_LOCK_TIMEOUT_SECONDS)
        self.store = store
        self.slots = SlotLedger(store, locks=locks, id_factory=slot_id_factory, **(ledger_options or {}))
        self.appointments = AppointmentLifecycle(
            store,
            self.slots,
            locks=locks,
            id_factory=appointment_id_factory,
            auto_confirm=auto_confirm,
        )

    # Ownership helpers

    def _own_doctor_profile(self, actor: Actor):
        profile = self.store.get_doctor_profile_by_user(actor.id)
        if profile is None:
            raise DoctorNotFoundError('Doctor profile not found for this account.')
        return profile

    def _is_doctor_owner(self, actor: Actor, doctor_id: int) -> bool:
        if actor.role != UserRole.DOCTOR:
            return False
        profile = self.store.get_doctor_profile_by_user(actor.id)
        return profile is not None and profile.id == doctor_id

    def _is_party(self, actor: Actor, appointment) -> bool:
        if actor.role == UserRole.PATIENT:
            return appointment.patient_id == actor.id
        return self._is_doctor_owner(actor, appointment.doctor_id)

    def _resolve_doctor_id(self, actor: Actor, doctor_id: int | None) -> int:
        if actor.is_admin:
            if doctor_id is None:
                raise ValidationError('doctor_id is required.')
            return doctor_id
        if actor.role != UserRole.DOCTOR:
            raise ForbiddenTransitionError('Doctor access required.')
        own_id = self._own_doctor_profile(actor).id
        if doctor_id is not None and doctor_id != own_id:
            raise ForbiddenTransitionError('Access denied.')
        return own_id

    # Slots

    def create_slot(self, actor: Actor, date, start_time, end_time, duration, doctor_id: int | None = None):
        doctor_id = self._resolve_doctor_id(actor, doctor_id)
        return self.slots.create_slot(doctor_id, date, start_time, end_time, duration)

    def delete_slot(self, actor: Actor, slot_id: int) -> None:
        slot = self.slots.get_slot(slot_id)
        if not actor.is_admin and not self._is_doctor_owner(actor, slot.doctor_id):
            raise ForbiddenTransitionError('Access denied.')
        self.slots.delete_slot(slot_id)

    def list_own_slots(self, actor: Actor, doctor_id: int | None = None) -> list:
        return self.slots.list_all(self._resolve_doctor_id(actor, doctor_id))

    def list_available(self, doctor_id: int, date=None) -> list:
        return self.slots.list_available(doctor_id, date)

    def audit_slots(self, actor: Actor) -> list[int]:
        if not actor.is_admin:
            raise ForbiddenTransitionError('Admin access required.')
        return self.slots.find_inconsistencies()

    # Appointments

    def book(
        self,
        actor: Actor,
        doctor_id: int,
        slot_id: int,
        patient_id: int | None = None,
        reason: str | None = None,
    ):
        if actor.role == UserRole.PATIENT:
            if patient_id is not None and patient_id != actor.id:
                raise ForbiddenTransitionError('Patients can only book appointments for themselves.')
            patient_id = actor.id
        elif patient_id is None:
            raise ValidationError('patient_id is required.')
        elif not actor.is_admin and not self._is_doctor_owner(actor, doctor_id):
            raise ForbiddenTransitionError('Access denied.')

        return self.appointments.create(patient_id, doctor_id, slot_id, reason)

    def get_appointment(self, actor: Actor, appointment_id: int):
        appointment = self.appointments.get(appointment_id)
        if not actor.is_admin and not self._is_party(actor, appointment):
            raise ForbiddenTransitionError('Access denied.')
        return appointment

    def update_status(self, actor: Actor, appointment_id: int, new_status):
        new_status = parse_status(new_status)
        appointment = self.appointments.get(appointment_id)
        check_status_change(
            AppointmentStatus(appointment.status),
            new_status,
            actor,
            is_party=self._is_party(actor, appointment),
        )
        return self.appointments.set_status(appointment_id, new_status, actor)

    def cancel(self, actor: Actor, appointment_id: int):
        return self.update_status(actor, appointment_id, AppointmentStatus.CANCELLED)

    def confirm(self, actor: Actor, appointment_id: int):
        return self.update_status(actor, appointment_id, AppointmentStatus.CONFIRMED)

    def check_in(self, actor: Actor, appointment_id: int):
        return self.update_status(actor, appointment_id, AppointmentStatus.CHECKED_IN)

    def complete(self, actor: Actor, appointment_id: int):
        return self.update_status(actor, appointment_id, AppointmentStatus.COMPLETED)

    def list_patient_appointments(self, actor: Actor, patient_id: int | None = None, status=None) -> list:
        if actor.role == UserRole.PATIENT:
            if patient_id is not None and patient_id != actor.id:
                raise ForbiddenTransitionError('Access denied.')
            patient_id = actor.id
        elif not actor.is_admin:
            raise ForbiddenTransitionError('Access denied.')
        elif patient_id is None:
            raise ValidationError('patient_id is required.')
        return self.appointments.list_for_patient(patient_id, status)

    def list_doctor_appointments(self, actor: Actor, doctor_id: int | None = None, status=None) -> list:
        return self.appointments.list_for_doctor(self._resolve_doctor_id(actor, doctor_id), status)

    def list_all_appointments(self, actor: Actor, status=None) -> list:
        if not actor.is_admin:
            raise ForbiddenTransitionError('Admin access required.')
        return self.appointments.list_all(status)
