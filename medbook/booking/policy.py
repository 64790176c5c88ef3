"""Who may move an appointment between which statuses.

``TRANSITIONS`` is the single source for both the state machine and the
role rules: each allowed ``(current, new)`` pair maps to the roles that may
perform it. Admins appear on every pair but, like everyone else, can never
leave a terminal status.
"""

from dataclasses import dataclass

from medbook.booking.enums import AppointmentStatus, UserRole
from medbook.booking.errors import (
    ForbiddenTransitionError,
    InvalidTransitionError,
    ValidationError,
)


@dataclass(frozen=True)
class Actor:
    """Authenticated identity performing an operation."""

    id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


_ANY_STAFF = frozenset({UserRole.DOCTOR, UserRole.ADMIN})
_ANY_PARTY = frozenset({UserRole.PATIENT, UserRole.DOCTOR, UserRole.ADMIN})

TRANSITIONS: dict[tuple[AppointmentStatus, AppointmentStatus], frozenset[UserRole]] = {
    (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED): _ANY_STAFF,
    (AppointmentStatus.PENDING, AppointmentStatus.CANCELLED): _ANY_PARTY,
    (AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED): _ANY_PARTY,
    (AppointmentStatus.CONFIRMED, AppointmentStatus.CHECKED_IN): _ANY_STAFF,
    (AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED): _ANY_STAFF,
    (AppointmentStatus.CHECKED_IN, AppointmentStatus.COMPLETED): _ANY_STAFF,
}


def parse_status(value) -> AppointmentStatus:
    if isinstance(value, AppointmentStatus):
        return value
    try:
        return AppointmentStatus(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f'Unknown appointment status: {value!r}.') from exc


def parse_role(value) -> UserRole:
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f'Unknown user role: {value!r}.') from exc


def allowed_targets(current: AppointmentStatus, role: UserRole) -> list[AppointmentStatus]:
    return [new for (old, new), roles in TRANSITIONS.items() if old == current and role in roles]


def check_status_change(
    current: AppointmentStatus,
    new: AppointmentStatus,
    actor: Actor,
    is_party: bool = True,
) -> None:
    """Raise unless ``actor`` may move an appointment from ``current`` to ``new``.

    Terminal statuses are reported as invalid to everyone, before ownership is
    considered, so a finished appointment never looks editable.
    """
    if current.is_terminal:
        raise InvalidTransitionError(
            f'Appointment is already {current.value}; no further status changes are allowed.'
        )

    if not actor.is_admin and not is_party:
        raise ForbiddenTransitionError('Access denied.')

    if actor.role == UserRole.PATIENT and new != AppointmentStatus.CANCELLED:
        raise ForbiddenTransitionError('Patients can only cancel appointments.')

    roles = TRANSITIONS.get((current, new))
    if roles is None:
        raise InvalidTransitionError(f'Cannot change status from {current.value} to {new.value}.')

    if actor.role not in roles:
        raise ForbiddenTransitionError(
            f'Role {actor.role.value} cannot change status from {current.value} to {new.value}.'
        )
