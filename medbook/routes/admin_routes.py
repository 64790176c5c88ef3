from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medbook.auth.dependencies import require_role
from medbook.booking.enums import DoctorStatus, UserRole
from medbook.booking.policy import Actor
from medbook.database import get_db
from medbook.routes.common import (
    booking_errors,
    build_accounts,
    build_coordinator,
    build_directory,
    ensure_database_ready,
)
from medbook.routes.schemas import AppointmentResponse, DoctorResponse, SlotAuditResponse, UserResponse

router = APIRouter(tags=['admin'])

require_admin = require_role(UserRole.ADMIN)


@router.get('/appointments', response_model=list[AppointmentResponse])
def list_all_appointments(
    status_filter: str | None = Query(default=None, alias='status'),
    actor: Actor = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_coordinator(db).list_all_appointments(actor, status_filter)


@router.get('/doctors', response_model=list[DoctorResponse])
def list_doctors(
    status_filter: str | None = Query(default=None, alias='status'),
    actor: Actor = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_directory(db).list_doctors(actor, status_filter)


@router.get('/doctors/pending', response_model=list[DoctorResponse])
def list_pending_doctors(
    actor: Actor = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_directory(db).list_doctors(actor, DoctorStatus.PENDING)


@router.put('/doctors/{doctor_id}/approve', response_model=DoctorResponse)
def approve_doctor(
    doctor_id: int,
    actor: Actor = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_directory(db).approve(actor, doctor_id)


@router.put('/doctors/{doctor_id}/reject', response_model=DoctorResponse)
def reject_doctor(
    doctor_id: int,
    actor: Actor = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_directory(db).reject(actor, doctor_id)


@router.get('/slots/audit', response_model=SlotAuditResponse)
def audit_slots(
    actor: Actor = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        broken = build_coordinator(db).audit_slots(actor)
        return SlotAuditResponse(consistent=not broken, inconsistent_slot_ids=broken)


@router.get('/users', response_model=list[UserResponse])
def list_users(
    role: str | None = Query(default=None),
    actor: Actor = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    with booking_errors(db):
        return build_accounts(db).list_users(actor, role)
