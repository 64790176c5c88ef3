"""Storage port used by the booking core.

The slot ledger and the appointment lifecycle only talk to this interface.
Conditional writes (``set_slot_booked``, ``delete_unbooked_slot``,
``update_appointment_status``) report whether a row matched so that callers
can implement check-and-set without trusting an earlier read.

Listing methods return rows ordered by date, start time and id, ascending.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from medbook.booking.enums import AppointmentStatus, DoctorStatus, UserRole


class BookingStore(ABC):

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        """Unit of work: commit on success, roll back on any exception.

        Nested use joins the outermost unit.
        """

    # Identity records

    @abstractmethod
    def get_user(self, user_id: int):
        ...

    @abstractmethod
    def list_users(self, role: UserRole | None = None) -> list:
        ...

    @abstractmethod
    def get_doctor_profile(self, profile_id: int):
        ...

    @abstractmethod
    def get_doctor_profile_by_user(self, user_id: int):
        ...

    @abstractmethod
    def list_doctor_profiles(
        self,
        status: DoctorStatus | None = None,
        specialization: str | None = None,
    ) -> list:
        ...

    @abstractmethod
    def list_specializations(self, status: DoctorStatus | None = None) -> list[str]:
        """Distinct specializations, sorted, optionally limited to one approval status."""

    @abstractmethod
    def update_doctor_status(self, profile_id: int, status: DoctorStatus) -> bool:
        ...

    # Slots

    @abstractmethod
    def add_slot(
        self,
        doctor_id: int,
        date: str,
        start_time: str,
        end_time: str,
        duration_minutes: int,
        slot_id: int | None = None,
    ):
        ...

    @abstractmethod
    def get_slot(self, slot_id: int):
        ...

    @abstractmethod
    def list_slots(
        self,
        doctor_id: int | None = None,
        date: str | None = None,
        is_booked: bool | None = None,
    ) -> list:
        ...

    @abstractmethod
    def set_slot_booked(self, slot_id: int, booked: bool) -> bool:
        """Flip ``is_booked`` to ``booked`` only if it currently holds the opposite."""

    @abstractmethod
    def delete_unbooked_slot(self, slot_id: int) -> bool:
        ...

    # Appointments

    @abstractmethod
    def add_appointment(
        self,
        patient_id: int,
        doctor_id: int,
        slot_id: int,
        date: str,
        start_time: str,
        end_time: str,
        status: AppointmentStatus,
        reason: str | None = None,
        appointment_id: int | None = None,
    ):
        ...

    @abstractmethod
    def get_appointment(self, appointment_id: int):
        ...

    @abstractmethod
    def update_appointment_status(
        self,
        appointment_id: int,
        expected: AppointmentStatus,
        new: AppointmentStatus,
    ) -> bool:
        ...

    @abstractmethod
    def list_appointments(
        self,
        patient_id: int | None = None,
        doctor_id: int | None = None,
        slot_id: int | None = None,
        status: AppointmentStatus | None = None,
    ) -> list:
        ...
