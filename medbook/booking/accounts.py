from medbook.booking.errors import ForbiddenTransitionError
from medbook.booking.policy import Actor, parse_role
from medbook.booking.store import BookingStore


class AccountDirectory:
    """Admin listing of user accounts."""

    def __init__(self, store: BookingStore):
        self.store = store

    def list_users(self, actor: Actor, role=None) -> list:
        if not actor.is_admin:
            raise ForbiddenTransitionError('Admin access required.')
        role = None if role is None else parse_role(role)
        return self.store.list_users(role=role)
