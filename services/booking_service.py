# services/booking_service.py

import logging

from models.booking import (
    ADDRESS_REQUIRED_SERVICES,
    STATUS_BOOKED,
    STATUS_CANCELLED,
    VALID_SERVICES,
)
from models.user import ROLE_OWNER
from .auth_service import AuthService
from .booking_store import BookingStore
from .errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from .notifications import dispatch_booking_notifications
from .slot_store import SlotStore
from .validators import as_int, normalize_email, sanitize_string, validate_name

logger = logging.getLogger(__name__)

SLOT_UNAVAILABLE = "Slot unavailable."


def parse_booking_request(payload):
    availability_id = payload.get('availability_id')
    service = payload.get('service')
    customer_name = payload.get('customer_name')
    customer_email = payload.get('customer_email')
    if not availability_id or not service or not customer_name or not customer_email:
        raise ValidationError("Missing booking data.")

    if service not in VALID_SERVICES:
        raise ValidationError("Invalid service selected.")

    name = validate_name(customer_name)
    email = normalize_email(customer_email)

    address = sanitize_string(payload.get('address') or '')
    if service in ADDRESS_REQUIRED_SERVICES and not address:
        raise ValidationError("Service address is required for mobile bookings.")

    slot_id = as_int(availability_id)
    if slot_id is None or slot_id < 1:
        raise ValidationError("Invalid slot ID.")

    return {
        'slot_id': slot_id,
        'service': service,
        'name': name,
        'email': email,
        'address': address or None,
    }


class BookingService:

    def __init__(self, session):
        self.session = session
        self.slots = SlotStore(session)
        self.bookings = BookingStore(session)
        self.auth = AuthService(session)

    def create_booking(self, payload, authenticated_user_id=None):
        """
        Consume an open slot for a customer.

        Claiming the slot (open -> closed) is the admission check itself, so two
        requests racing for one slot cannot both succeed. The claim, the guest
        account and the booking row commit together or not at all.
        """
        request = parse_booking_request(payload)

        try:
            if not self.slots.claim(request['slot_id']):
                raise ConflictError(SLOT_UNAVAILABLE)

            slot = self.slots.get(request['slot_id'])
            user_id = self.auth.resolve_customer(
                request['email'], request['name'], authenticated_id=authenticated_user_id
            )
            booking = self.bookings.insert(
                user_id=user_id,
                slot=slot,
                service=request['service'],
                address=request['address'],
            )
            self.session.commit()
        except ConflictError:
            self.session.rollback()
            logger.info(f"⛔ Booking rejected, slot {request['slot_id']} unavailable")
            raise
        except Exception:
            self.session.rollback()
            raise

        result = {
            'id': booking.id,
            'date': booking.date.isoformat(),
            'start_time': booking.start_time.strftime('%H:%M'),
            'end_time': booking.end_time.strftime('%H:%M'),
            'service': booking.service,
            'status': booking.status,
            'customer_name': request['name'],
            'customer_email': request['email'],
        }
        logger.info(f"✅ Booking {booking.id} created for slot {request['slot_id']}")

        dispatch_booking_notifications(dict(result))
        return result

    def list_for_user(self, user_id):
        return [booking.to_dict() for booking in self.bookings.list_for_user(user_id)]

    def list_all(self):
        rows = []
        for booking, user_name in self.bookings.list_all():
            data = booking.to_dict()
            data['user_name'] = user_name
            rows.append(data)
        return rows

    def cancel(self, booking_id, user):
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        if user.get('role') != ROLE_OWNER and booking.user_id != user.get('id'):
            raise AuthorizationError("You can only cancel your own bookings.")
        if booking.status != STATUS_BOOKED:
            raise ConflictError("Only active bookings can be cancelled.")

        try:
            cancelled = self.bookings.set_status(booking_id, STATUS_BOOKED, STATUS_CANCELLED)
            if not cancelled:
                raise ConflictError("Only active bookings can be cancelled.")
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(f"🚫 Booking {booking_id} cancelled")
        return {'id': booking_id, 'status': STATUS_CANCELLED}
