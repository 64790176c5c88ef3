from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medbook.auth.dependencies import get_optional_actor
from medbook.booking.policy import Actor
from medbook.database import get_db
from medbook.routes.common import booking_errors, build_coordinator, build_directory, ensure_database_ready
from medbook.routes.schemas import DoctorResponse, SlotResponse

router = APIRouter(tags=['doctors'])


@router.get('', response_model=list[DoctorResponse])
def list_doctors(
    specialization: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_directory(db).list_approved(specialization)


@router.get('/specializations', response_model=list[str])
def list_specializations(db: Session = Depends(get_db)):
    ensure_database_ready()

    with booking_errors(db):
        return build_directory(db).list_specializations()


@router.get('/{doctor_id}', response_model=DoctorResponse)
def get_doctor(
    doctor_id: int,
    actor: Actor | None = Depends(get_optional_actor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_directory(db).get_doctor(doctor_id, actor)


@router.get('/{doctor_id}/availability', response_model=list[SlotResponse])
def list_available_slots(
    doctor_id: int,
    date: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_coordinator(db).list_available(doctor_id, date)
