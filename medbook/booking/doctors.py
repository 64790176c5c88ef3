import logging

from medbook.booking.enums import DoctorStatus, UserRole
from medbook.booking.errors import DoctorNotFoundError, ForbiddenTransitionError, ValidationError
from medbook.booking.policy import Actor
from medbook.booking.store import BookingStore

logger = logging.getLogger(__name__)


def parse_doctor_status(value) -> DoctorStatus:
    if isinstance(value, DoctorStatus):
        return value
    try:
        return DoctorStatus(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f'Unknown doctor status: {value!r}.') from exc


class DoctorDirectory:
    """Doctor listings and the admin approval workflow.

    Profiles are never deleted; rejecting one hides its slots from patients.
    """

    def __init__(self, store: BookingStore):
        self.store = store

    def list_approved(self, specialization: str | None = None) -> list:
        return self.store.list_doctor_profiles(status=DoctorStatus.APPROVED, specialization=specialization)

    def list_specializations(self) -> list[str]:
        return self.store.list_specializations(status=DoctorStatus.APPROVED)

    def list_doctors(self, actor: Actor, status=None) -> list:
        self._require_admin(actor)
        status = None if status is None else parse_doctor_status(status)
        return self.store.list_doctor_profiles(status=status)

    def get_doctor(self, profile_id: int, actor: Actor | None = None):
        profile = self.store.get_doctor_profile(profile_id)
        if profile is None:
            raise DoctorNotFoundError()
        if profile.status == DoctorStatus.APPROVED.value:
            return profile
        # Unapproved profiles stay hidden from everyone but admins and their owner.
        if actor is not None and (actor.is_admin or actor.id == profile.user_id):
            return profile
        raise DoctorNotFoundError()

    def approve(self, actor: Actor, profile_id: int):
        return self._set_status(actor, profile_id, DoctorStatus.APPROVED)

    def reject(self, actor: Actor, profile_id: int):
        return self._set_status(actor, profile_id, DoctorStatus.REJECTED)

    def _set_status(self, actor: Actor, profile_id: int, status: DoctorStatus):
        self._require_admin(actor)
        with self.store.transaction():
            if not self.store.update_doctor_status(profile_id, status):
                raise DoctorNotFoundError()
        logger.info('Doctor profile %s set to %s by admin %s', profile_id, status.value, actor.id)
        return self.store.get_doctor_profile(profile_id)

    @staticmethod
    def _require_admin(actor: Actor) -> None:
        if actor.role != UserRole.ADMIN:
            raise ForbiddenTransitionError('Admin access required.')
