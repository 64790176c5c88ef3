"""Error kinds raised by the booking core.

Every error is recoverable by the caller and carries a stable ``kind`` plus a
human readable ``message``. Storage failures are not wrapped here.
"""


class BookingError(Exception):
    kind = 'BookingError'
    default_message = 'Booking operation failed.'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {'kind': self.kind, 'message': self.message}


class NotFoundError(BookingError):
    kind = 'NotFoundError'
    default_message = 'Resource not found.'


class SlotNotFoundError(NotFoundError):
    kind = 'SlotNotFoundError'
    default_message = 'Availability slot not found.'


class AppointmentNotFoundError(NotFoundError):
    kind = 'AppointmentNotFoundError'
    default_message = 'Appointment not found.'


class DoctorNotFoundError(NotFoundError):
    kind = 'DoctorNotFoundError'
    default_message = 'Doctor profile not found.'


class SlotAlreadyBookedError(BookingError):
    kind = 'SlotAlreadyBookedError'
    default_message = 'Slot is already booked.'


class SlotBookedError(BookingError):
    kind = 'SlotBookedError'
    default_message = 'Cannot delete a booked slot.'


class SlotOverlapError(BookingError):
    kind = 'SlotOverlapError'
    default_message = 'Slot overlaps an existing slot for this doctor.'


class SlotBusyError(BookingError):
    kind = 'SlotBusyError'
    default_message = 'Slot is being updated by another request. Try again.'


class DoctorNotApprovedError(BookingError):
    kind = 'DoctorNotApprovedError'
    default_message = 'Doctor is not approved for bookings.'


class InvalidTransitionError(BookingError):
    kind = 'InvalidTransitionError'
    default_message = 'Status transition is not allowed.'


class ForbiddenTransitionError(BookingError):
    kind = 'ForbiddenTransitionError'
    default_message = 'Access denied.'


class ValidationError(BookingError):
    kind = 'ValidationError'
    default_message = 'Invalid booking data.'
