from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from medbook.auth.dependencies import get_current_actor
from medbook.booking.policy import Actor
from medbook.booking.timeslots import normalize_date
from medbook.database import get_db
from medbook.routes.common import booking_errors, build_coordinator, ensure_database_ready
from medbook.routes.schemas import CreateSlotRequest, SlotResponse

router = APIRouter(tags=['availability'])


def reject_past_date(slot_date: str) -> None:
    if slot_date < date.today().isoformat():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Slots cannot be created for a past date.',
        )


@router.get('/slots', response_model=list[SlotResponse])
def list_my_slots(
    doctor_id: int | None = Query(default=None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_coordinator(db).list_own_slots(actor, doctor_id)


@router.post('/slots', response_model=SlotResponse, status_code=status.HTTP_201_CREATED)
def create_slot(
    data: CreateSlotRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        reject_past_date(normalize_date(data.date))
        return build_coordinator(db).create_slot(
            actor,
            date=data.date,
            start_time=data.start_time,
            end_time=data.end_time,
            duration=data.duration,
            doctor_id=data.doctor_id,
        )


@router.delete('/slots/{slot_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_slot(
    slot_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> None:
    ensure_database_ready()

    with booking_errors(db):
        build_coordinator(db).delete_slot(actor, slot_id)
