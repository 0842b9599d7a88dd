"""
Booking Errors

Every failure the availability engine and the reservation committer
report is a ``BookingError``. ``code`` is the stable machine-readable
kind returned to API clients.
"""


class BookingError(Exception):
    code = 'booking_error'
    default_message = 'Booking request failed.'

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidInterval(BookingError):
    code = 'invalid_interval'
    default_message = 'Pickup must be a valid date before drop-off.'


class VehicleNotFound(BookingError):
    code = 'vehicle_not_found'
    default_message = 'Vehicle not found.'


class VehicleNotBookable(BookingError):
    code = 'vehicle_not_bookable'
    default_message = 'Vehicle is not available for booking.'


class PaymentNotVerified(BookingError):
    code = 'payment_not_verified'
    default_message = 'Payment could not be verified.'


class VehicleUnavailable(BookingError):
    """Another blocking booking overlaps the requested interval."""
    code = 'vehicle_unavailable'
    default_message = 'Vehicle is already booked for the selected dates.'


class StorageUnavailable(BookingError):
    """The database could not be reached; the call is safe to retry."""
    code = 'storage_unavailable'
    default_message = 'Booking storage is temporarily unavailable.'


class BookingNotFound(BookingError):
    code = 'booking_not_found'
    default_message = 'Booking not found.'


class InvalidStatusTransition(BookingError):
    code = 'invalid_status_transition'
    default_message = 'This status change is not allowed.'


class PaymentReferenceConflict(BookingError):
    """The payment id already backs a different reservation."""
    code = 'payment_reference_conflict'
    default_message = 'This payment is already used by another booking.'


# Raised by ledgers, translated by the committer


class ReservationConflict(BookingError):
    code = 'reservation_conflict'
    default_message = 'A blocking booking overlaps the requested interval.'


class DuplicatePaymentReference(BookingError):
    code = 'duplicate_payment_reference'
    default_message = 'A booking with this payment id already exists.'
