import logging
from contextlib import contextmanager

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medbook.booking.accounts import AccountDirectory
from medbook.booking.coordinator import BookingCoordinator
from medbook.booking.doctors import DoctorDirectory
from medbook.booking.errors import (
    BookingError,
    DoctorNotApprovedError,
    ForbiddenTransitionError,
    InvalidTransitionError,
    NotFoundError,
    SlotAlreadyBookedError,
    SlotBookedError,
    SlotBusyError,
    SlotOverlapError,
    ValidationError,
)
from medbook.booking.locks import SlotLocks
from medbook.booking.sql_store import SqlBookingStore
from medbook.core import config
from medbook.database import ensure_booking_schema

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'

ERROR_STATUS_CODES = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    SlotAlreadyBookedError: status.HTTP_409_CONFLICT,
    SlotBookedError: status.HTTP_409_CONFLICT,
    SlotOverlapError: status.HTTP_409_CONFLICT,
    SlotBusyError: status.HTTP_409_CONFLICT,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    ForbiddenTransitionError: status.HTTP_403_FORBIDDEN,
    DoctorNotApprovedError: status.HTTP_403_FORBIDDEN,
    ValidationError: status.HTTP_400_BAD_REQUEST,
}

# Shared by every request in this process so concurrent bookings of one slot serialize.
slot_locks = SlotLocks(timeout=config.SLOT_LOCK_TIMEOUT_SECONDS)


def status_code_for(exc: BookingError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[error_type]
    return status.HTTP_400_BAD_REQUEST


def to_http_exception(exc: BookingError) -> HTTPException:
    return HTTPException(
        status_code=status_code_for(exc),
        detail=exc.message,
        headers={'X-Error-Kind': exc.kind},
    )


def ensure_database_ready() -> None:
    try:
        ensure_booking_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@contextmanager
def booking_errors(db: Session):
    """Translate booking errors and database failures into HTTP responses."""
    try:
        yield
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Database error while handling booking request')
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


def build_coordinator(db: Session) -> BookingCoordinator:
    return BookingCoordinator(SqlBookingStore(db), locks=slot_locks)


def build_directory(db: Session) -> DoctorDirectory:
    return DoctorDirectory(SqlBookingStore(db))


def build_accounts(db: Session) -> AccountDirectory:
    return AccountDirectory(SqlBookingStore(db))
