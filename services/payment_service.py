# services/payment_service.py

import logging

import stripe
from flask import current_app

from models.booking import Booking
from models.payment import Payment
from .errors import DependencyError, NotFoundError, ValidationError
from .validators import as_int

logger = logging.getLogger(__name__)

VALID_CURRENCIES = ("usd", "eur", "gbp")
MIN_AMOUNT_CENTS = 50


class PaymentService:

    def __init__(self, session):
        self.session = session

    @staticmethod
    def create_stripe_intent(amount, currency, booking_id):
        secret = current_app.config.get('STRIPE_SECRET')
        if not secret:
            raise RuntimeError("Stripe secret key is not configured.")

        return stripe.PaymentIntent.create(
            amount=amount,
            currency=currency,
            metadata={'booking_id': str(booking_id) if booking_id else ''},
            api_key=secret,
        )

    def create_intent(self, payload):
        amount = payload.get('amount')
        currency = payload.get('currency')
        booking_id = payload.get('booking_id')
        if not amount or not currency:
            raise ValidationError("Amount and currency are required.")

        amount = as_int(amount)
        if amount is None or amount < MIN_AMOUNT_CENTS:
            raise ValidationError("Invalid payment amount.")

        currency = str(currency).lower()
        if currency not in VALID_CURRENCIES:
            raise ValidationError("Unsupported currency.")

        booking = None
        if booking_id:
            booking = self.session.get(Booking, as_int(booking_id) or 0)
            if booking is None:
                raise NotFoundError("Booking not found")

        try:
            intent = self.create_stripe_intent(amount, currency, booking_id)
        except (stripe.error.StripeError, RuntimeError) as e:
            logger.error(f"[Stripe Error] {str(e)}")
            raise DependencyError("Payment processing error.")

        if booking is not None:
            booking.stripe_payment_intent_id = intent.id
            self.session.add(Payment(
                booking_id=booking.id,
                amount=amount,
                currency=currency,
                status=getattr(intent, 'status', None) or 'unknown',
                stripe_payment_intent_id=intent.id,
            ))
            try:
                self.session.commit()
            except Exception:
                self.session.rollback()
                raise

        return {'clientSecret': intent.client_secret, 'id': intent.id}
