# services/validators.py

import re
from datetime import datetime

from .errors import ValidationError

DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
TIME_RE = re.compile(r'^\d{2}:\d{2}$')
EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
TAG_RE = re.compile(r'<[^>]*>')


def is_valid_date(value):
    if not isinstance(value, str) or not DATE_RE.match(value):
        return False
    try:
        datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        return False
    return True


def is_valid_time(value):
    if not isinstance(value, str) or not TIME_RE.match(value):
        return False
    try:
        datetime.strptime(value, '%H:%M')
    except ValueError:
        return False
    return True


def parse_date(value):
    return datetime.strptime(value, '%Y-%m-%d').date()


def parse_time(value):
    return datetime.strptime(value, '%H:%M').time()


def sanitize_string(value):
    """Trim whitespace and strip HTML tags. Non-strings become ''."""
    if not isinstance(value, str):
        return ''
    return TAG_RE.sub('', value.strip())


def sanitize_payload(data):
    """Shallow-sanitize every string field of a JSON object."""
    if not isinstance(data, dict):
        return {}
    return {k: sanitize_string(v) if isinstance(v, str) else v for k, v in data.items()}


def is_valid_email(email):
    return bool(EMAIL_RE.match(email or ''))


def is_strong_password(password):
    """At least 8 characters with at least one letter and one digit."""
    return (
        isinstance(password, str)
        and len(password) >= 8
        and re.search(r'[a-zA-Z]', password) is not None
        and re.search(r'[0-9]', password) is not None
    )


def validate_name(value):
    name = sanitize_string(value)
    if not name or len(name) < 2 or len(name) > 100:
        raise ValidationError("Name must be between 2 and 100 characters.")
    return name


def normalize_email(value):
    email = str(value or '').strip().lower()
    if not is_valid_email(email):
        raise ValidationError("Invalid email format.")
    return email


def as_int(value):
    """Strict integer coercion: bools and fractional numbers are rejected."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and re.match(r'^-?\d+$', value.strip()):
        return int(value.strip())
    return None


def require_json_object(data):
    """Request bodies must be JSON objects; a missing body reads as empty."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data
