# services/notifications.py

import logging
import time
from threading import Thread

import requests
from flask import current_app
from flask_mail import Message

from db.extensions import mail

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"
RETRY_BACKOFF_SECONDS = 1


def format_time_12h(time_text):
    """'16:30' -> '4:30 PM'"""
    hour_str, _, minute_str = str(time_text or "00:00").partition(":")
    hour = int(hour_str or 0)
    minute = int(minute_str or 0)
    suffix = "PM" if hour >= 12 else "AM"
    hour12 = ((hour + 11) % 12) + 1
    return f"{hour12}:{minute:02d} {suffix}"


def _with_retries(label, func, attempts):
    for attempt in range(1, attempts + 1):
        try:
            func()
            return True
        except Exception as e:
            logger.error(f"❌ {label} failed (attempt {attempt}/{attempts}): {str(e)}")
            if attempt < attempts:
                time.sleep(RETRY_BACKOFF_SECONDS * attempt)
    return False


class NotificationService:
    """Booking side effects. Never raises into the caller; failures are logged."""

    @staticmethod
    def owner_sms_body(booking):
        return "\n".join([
            "New booking",
            f"Name: {booking['customer_name']}",
            f"Email: {booking['customer_email']}",
            f"Service: {booking['service']}",
            f"Date: {booking['date']}",
            f"Time: {format_time_12h(booking['start_time'])} - {format_time_12h(booking['end_time'])}",
        ])

    @staticmethod
    def send_owner_booking_sms(booking):
        config = current_app.config
        sid = config.get('TWILIO_ACCOUNT_SID')
        token = config.get('TWILIO_AUTH_TOKEN')
        sender = config.get('TWILIO_FROM_NUMBER')
        recipient = config.get('OWNER_PHONE_NUMBER')

        if not sid or not token or not sender or not recipient:
            logger.debug("Twilio not configured; skipping owner SMS")
            return False

        def post():
            response = requests.post(
                TWILIO_MESSAGES_URL.format(sid=sid),
                data={'To': recipient, 'From': sender, 'Body': NotificationService.owner_sms_body(booking)},
                auth=(sid, token),
                timeout=config.get('NOTIFY_TIMEOUT_SECONDS', 10),
            )
            if response.status_code < 200 or response.status_code >= 300:
                raise RuntimeError(f"Twilio SMS failed ({response.status_code}): {response.text}")

        sent = _with_retries("Owner booking SMS", post, config.get('NOTIFY_MAX_ATTEMPTS', 2))
        if sent:
            logger.info(f"📱 Owner SMS sent for booking {booking['id']}")
        return sent

    @staticmethod
    def send_customer_confirmation_email(booking):
        msg = Message(
            subject=f"Booking confirmed - {booking['service']} on {booking['date']}",
            recipients=[booking['customer_email']],
            sender=current_app.config['MAIL_DEFAULT_SENDER'],
        )
        msg.body = f"""
Hi {booking['customer_name']},

Your booking is confirmed.

Service: {booking['service']}
Date: {booking['date']}
Time: {format_time_12h(booking['start_time'])} - {format_time_12h(booking['end_time'])}
Booking reference: {booking['id']}

See you soon!
"""
        sent = _with_retries(
            "Booking confirmation email",
            lambda: mail.send(msg),
            current_app.config.get('NOTIFY_MAX_ATTEMPTS', 2),
        )
        if sent:
            logger.info(f"✅ Confirmation email sent for booking {booking['id']}")
        return sent

    @staticmethod
    def notify_booking_created(booking):
        NotificationService.send_owner_booking_sms(booking)
        NotificationService.send_customer_confirmation_email(booking)


def _run_in_app_context(app, func, *args):
    with app.app_context():
        try:
            func(*args)
        except Exception as e:
            app.logger.error(f"❌ Background notification crashed: {str(e)}", exc_info=True)


def dispatch_booking_notifications(booking):
    """Fire-and-forget after the booking transaction has committed."""
    app = current_app._get_current_object()
    if not app.config.get('NOTIFY_ASYNC', True):
        _run_in_app_context(app, NotificationService.notify_booking_created, booking)
        return None

    thread = Thread(
        target=_run_in_app_context,
        args=(app, NotificationService.notify_booking_created, booking),
        daemon=True,
    )
    thread.start()
    return thread
