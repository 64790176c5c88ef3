from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from medbook.auth.dependencies import get_current_actor
from medbook.booking.policy import Actor
from medbook.database import get_db
from medbook.routes.common import booking_errors, build_coordinator, ensure_database_ready
from medbook.routes.schemas import AppointmentResponse, CreateAppointmentRequest, UpdateStatusRequest

router = APIRouter(tags=['appointments'])


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_coordinator(db).book(
            actor,
            doctor_id=data.doctor_id,
            slot_id=data.slot_id,
            patient_id=data.patient_id,
            reason=data.reason,
        )


@router.get('/patient', response_model=list[AppointmentResponse])
def list_patient_appointments(
    status_filter: str | None = Query(default=None, alias='status'),
    patient_id: int | None = Query(default=None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_coordinator(db).list_patient_appointments(actor, patient_id, status_filter)


@router.get('/doctor', response_model=list[AppointmentResponse])
def list_doctor_appointments(
    status_filter: str | None = Query(default=None, alias='status'),
    doctor_id: int | None = Query(default=None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_coordinator(db).list_doctor_appointments(actor, doctor_id, status_filter)


@router.get('/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_coordinator(db).get_appointment(actor, appointment_id)


@router.patch('/{appointment_id}/status', response_model=AppointmentResponse)
@router.put('/{appointment_id}/status', response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: int,
    data: UpdateStatusRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_coordinator(db).update_status(actor, appointment_id, data.status)
