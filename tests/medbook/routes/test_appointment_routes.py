import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from medbook.booking.coordinator import BookingCoordinator
from medbook.booking.sql_store import SqlBookingStore
from medbook.routes.appointment_routes import (
    create_appointment,
    get_appointment,
    list_doctor_appointments,
    list_patient_appointments,
    update_appointment_status,
)
from medbook.routes.schemas import CreateAppointmentRequest, UpdateStatusRequest


@pytest.fixture(autouse=True)
def skip_schema_check(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('medbook.routes.appointment_routes.ensure_database_ready', lambda: None)


@pytest.fixture
def slot(db, clinic):
    coordinator = BookingCoordinator(SqlBookingStore(db))
    return coordinator.create_slot(clinic.doctor_actor, '2099-03-01', '09:00', '09:30', 30)


def test_create_appointment_request_accepts_camel_case() -> None:
    request = CreateAppointmentRequest(doctorId=1, slotId=2, reason='   ')

    assert request.doctor_id == 1
    assert request.slot_id == 2
    assert request.patient_id is None
    assert request.reason is None


def test_update_status_request_normalizes_status() -> None:
    assert UpdateStatusRequest(status=' Confirmed ').status == 'confirmed'

    with pytest.raises(ValidationError):
        UpdateStatusRequest(status='   ')


def test_patient_books_slot(db, clinic, slot) -> None:
    data = CreateAppointmentRequest(doctor_id=clinic.doctor.id, slot_id=slot.id, reason='Chest pain')

    appointment = create_appointment(data=data, actor=clinic.p1, db=db)

    assert appointment.patient_id == clinic.patient_one.id
    assert appointment.status == 'pending'
    assert appointment.reason == 'Chest pain'


def test_double_booking_is_conflict(db, clinic, slot) -> None:
    data = CreateAppointmentRequest(doctor_id=clinic.doctor.id, slot_id=slot.id)
    create_appointment(data=data, actor=clinic.p1, db=db)

    with pytest.raises(HTTPException) as exception_info:
        create_appointment(data=data, actor=clinic.p2, db=db)

    assert exception_info.value.status_code == 409
    assert exception_info.value.detail == 'Slot is already booked.'
    assert exception_info.value.headers == {'X-Error-Kind': 'SlotAlreadyBookedError'}


def test_booking_unapproved_doctor_is_forbidden(db, clinic) -> None:
    coordinator = BookingCoordinator(SqlBookingStore(db))
    pending_slot = coordinator.create_slot(
        clinic.admin_actor,
        '2099-03-01',
        '09:00',
        '09:30',
        30,
        doctor_id=clinic.pending_doctor.id,
    )
    data = CreateAppointmentRequest(doctor_id=clinic.pending_doctor.id, slot_id=pending_slot.id)

    with pytest.raises(HTTPException) as exception_info:
        create_appointment(data=data, actor=clinic.p1, db=db)

    assert exception_info.value.status_code == 403
    assert exception_info.value.headers == {'X-Error-Kind': 'DoctorNotApprovedError'}


def test_patient_listing_is_scoped_to_caller(db, clinic, slot) -> None:
    data = CreateAppointmentRequest(doctor_id=clinic.doctor.id, slot_id=slot.id)
    appointment = create_appointment(data=data, actor=clinic.p1, db=db)

    mine = list_patient_appointments(status_filter=None, patient_id=None, actor=clinic.p1, db=db)
    theirs = list_patient_appointments(status_filter=None, patient_id=None, actor=clinic.p2, db=db)

    assert [a.id for a in mine] == [appointment.id]
    assert theirs == []

    with pytest.raises(HTTPException) as exception_info:
        list_patient_appointments(status_filter=None, patient_id=clinic.patient_one.id, actor=clinic.p2, db=db)
    assert exception_info.value.status_code == 403


def test_doctor_listing_filters_by_status(db, clinic, slot) -> None:
    data = CreateAppointmentRequest(doctor_id=clinic.doctor.id, slot_id=slot.id)
    appointment = create_appointment(data=data, actor=clinic.p1, db=db)

    pending = list_doctor_appointments(status_filter='pending', doctor_id=None, actor=clinic.doctor_actor, db=db)
    confirmed = list_doctor_appointments(status_filter='confirmed', doctor_id=None, actor=clinic.doctor_actor, db=db)

    assert [a.id for a in pending] == [appointment.id]
    assert confirmed == []

    with pytest.raises(HTTPException) as exception_info:
        list_doctor_appointments(status_filter='archived', doctor_id=None, actor=clinic.doctor_actor, db=db)
    assert exception_info.value.status_code == 400


def test_get_appointment_hides_from_strangers(db, clinic, slot) -> None:
    data = CreateAppointmentRequest(doctor_id=clinic.doctor.id, slot_id=slot.id)
    appointment = create_appointment(data=data, actor=clinic.p1, db=db)

    assert get_appointment(appointment_id=appointment.id, actor=clinic.doctor_actor, db=db).id == appointment.id

    with pytest.raises(HTTPException) as exception_info:
        get_appointment(appointment_id=appointment.id, actor=clinic.p2, db=db)
    assert exception_info.value.status_code == 403


def test_status_updates_follow_state_machine(db, clinic, slot) -> None:
    data = CreateAppointmentRequest(doctor_id=clinic.doctor.id, slot_id=slot.id)
    appointment = create_appointment(data=data, actor=clinic.p1, db=db)

    with pytest.raises(HTTPException) as exception_info:
        update_appointment_status(
            appointment_id=appointment.id,
            data=UpdateStatusRequest(status='confirmed'),
            actor=clinic.p1,
            db=db,
        )
    assert exception_info.value.status_code == 403
    assert exception_info.value.detail == 'Patients can only cancel appointments.'

    confirmed = update_appointment_status(
        appointment_id=appointment.id,
        data=UpdateStatusRequest(status='confirmed'),
        actor=clinic.doctor_actor,
        db=db,
    )
    assert confirmed.status == 'confirmed'

    cancelled = update_appointment_status(
        appointment_id=appointment.id,
        data=UpdateStatusRequest(status='cancelled'),
        actor=clinic.p1,
        db=db,
    )
    assert cancelled.status == 'cancelled'

    with pytest.raises(HTTPException) as exception_info:
        update_appointment_status(
            appointment_id=appointment.id,
            data=UpdateStatusRequest(status='confirmed'),
            actor=clinic.doctor_actor,
            db=db,
        )
    assert exception_info.value.status_code == 409
    assert exception_info.value.headers == {'X-Error-Kind': 'InvalidTransitionError'}


def test_status_update_for_missing_appointment_is_404(db, clinic) -> None:
    with pytest.raises(HTTPException) as exception_info:
        update_appointment_status(
            appointment_id=999,
            data=UpdateStatusRequest(status='cancelled'),
            actor=clinic.admin_actor,
            db=db,
        )

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Appointment not found.'
