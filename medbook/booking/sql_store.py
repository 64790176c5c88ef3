from contextlib import contextmanager

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from medbook.booking.enums import AppointmentStatus, DoctorStatus, UserRole
from medbook.booking.store import BookingStore
from medbook.models.appointment import Appointment
from medbook.models.availability import AvailabilitySlot
from medbook.models.doctor_profile import DoctorProfile
from medbook.models.user import User


class SqlBookingStore(BookingStore):
    """SQLAlchemy implementation of the booking storage port.

    Bound to one session; FastAPI hands each request its own.
    """

    def __init__(self, session: Session):
        self.session = session
        self._depth = 0

    @contextmanager
    def transaction(self):
        if self._depth:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        # Rows loaded before the unit of work may be stale by now.
        self.session.expire_all()
        self._depth = 1
        try:
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._depth = 0

    def get_user(self, user_id: int):
        return self.session.get(User, user_id)

    def list_users(self, role=None) -> list:
        statement = select(User)
        if role is not None:
            statement = statement.where(User.role == UserRole(role).value)
        return list(self.session.scalars(statement.order_by(User.id.asc())).all())

    def get_doctor_profile(self, profile_id: int):
        return self.session.get(DoctorProfile, profile_id)

    def get_doctor_profile_by_user(self, user_id: int):
        return self.session.scalars(
            select(DoctorProfile).where(DoctorProfile.user_id == user_id)
        ).first()

    def list_doctor_profiles(self, status=None, specialization=None) -> list:
        statement = select(DoctorProfile)
        if status is not None:
            statement = statement.where(DoctorProfile.status == DoctorStatus(status).value)
        if specialization:
            statement = statement.where(DoctorProfile.specialization.ilike(specialization.strip()))
        return list(self.session.scalars(statement.order_by(DoctorProfile.id.asc())).all())

    def list_specializations(self, status=None) -> list[str]:
        statement = select(DoctorProfile.specialization).distinct()
        if status is not None:
            statement = statement.where(DoctorProfile.status == DoctorStatus(status).value)
        return list(self.session.scalars(statement.order_by(DoctorProfile.specialization.asc())).all())

    def update_doctor_status(self, profile_id: int, status: DoctorStatus) -> bool:
        result = self.session.execute(
            update(DoctorProfile)
            .where(DoctorProfile.id == profile_id)
            .values(status=DoctorStatus(status).value)
            .execution_options(synchronize_session=False)
        )
        self.session.expire_all()
        return result.rowcount == 1

    def add_slot(self, doctor_id, date, start_time, end_time, duration_minutes, slot_id=None):
        slot = AvailabilitySlot(
            doctor_id=doctor_id,
            date=date,
            start_time=start_time,
            end_time=end_time,
            duration_minutes=duration_minutes,
            is_booked=False,
        )
        if slot_id is not None:
            slot.id = slot_id
        self.session.add(slot)
        self.session.flush()
        return slot

    def get_slot(self, slot_id: int):
        return self.session.get(AvailabilitySlot, slot_id)

    def list_slots(self, doctor_id=None, date=None, is_booked=None) -> list:
        statement = select(AvailabilitySlot)
        if doctor_id is not None:
            statement = statement.where(AvailabilitySlot.doctor_id == doctor_id)
        if date is not None:
            statement = statement.where(AvailabilitySlot.date == date)
        if is_booked is not None:
            statement = statement.where(AvailabilitySlot.is_booked.is_(is_booked))
        statement = statement.order_by(
            AvailabilitySlot.date.asc(),
            AvailabilitySlot.start_time.asc(),
            AvailabilitySlot.id.asc(),
        )
        return list(self.session.scalars(statement).all())

    def set_slot_booked(self, slot_id: int, booked: bool) -> bool:
        result = self.session.execute(
            update(AvailabilitySlot)
            .where(
                AvailabilitySlot.id == slot_id,
                AvailabilitySlot.is_booked.is_(not booked),
            )
            .values(is_booked=booked)
            .execution_options(synchronize_session=False)
        )
        self.session.expire_all()
        return result.rowcount == 1

    def delete_unbooked_slot(self, slot_id: int) -> bool:
        result = self.session.execute(
            delete(AvailabilitySlot)
            .where(
                AvailabilitySlot.id == slot_id,
                AvailabilitySlot.is_booked.is_(False),
            )
            .execution_options(synchronize_session=False)
        )
        self.session.expire_all()
        return result.rowcount == 1

    def add_appointment(
        self,
        patient_id,
        doctor_id,
        slot_id,
        date,
        start_time,
        end_time,
        status,
        reason=None,
        appointment_id=None,
    ):
        appointment = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            slot_id=slot_id,
            date=date,
            start_time=start_time,
            end_time=end_time,
            status=AppointmentStatus(status).value,
            reason=reason,
        )
        if appointment_id is not None:
            appointment.id = appointment_id
        self.session.add(appointment)
        self.session.flush()
        return appointment

    def get_appointment(self, appointment_id: int):
        return self.session.get(Appointment, appointment_id)

    def update_appointment_status(self, appointment_id, expected, new) -> bool:
        result = self.session.execute(
            update(Appointment)
            .where(
                Appointment.id == appointment_id,
                Appointment.status == AppointmentStatus(expected).value,
            )
            .values(status=AppointmentStatus(new).value)
            .execution_options(synchronize_session=False)
        )
        self.session.expire_all()
        return result.rowcount == 1

    def list_appointments(self, patient_id=None, doctor_id=None, slot_id=None, status=None) -> list:
        statement = select(Appointment)
        if patient_id is not None:
            statement = statement.where(Appointment.patient_id == patient_id)
        if doctor_id is not None:
            statement = statement.where(Appointment.doctor_id == doctor_id)
        if slot_id is not None:
            statement = statement.where(Appointment.slot_id == slot_id)
        if status is not None:
            statement = statement.where(Appointment.status == AppointmentStatus(status).value)
        statement = statement.order_by(
            Appointment.date.asc(),
            Appointment.start_time.asc(),
            Appointment.id.asc(),
        )
        return list(self.session.scalars(statement).unique().all())
