# services/security.py

from functools import wraps

from flask import g, request

from models.user import ROLE_OWNER
from .auth_service import verify_token
from .errors import AuthError, AuthorizationError


def _bearer_token():
    header = request.headers.get('Authorization', '')
    return header[7:] if header.startswith('Bearer ') else ''


def require_auth(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = _bearer_token()
        if not token:
            raise AuthError("Missing token")
        g.user = verify_token(token)
        return view(*args, **kwargs)
    return wrapper


def optional_auth(view):
    """Sets g.user when a valid token is present; invalid tokens are ignored."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        g.user = None
        token = _bearer_token()
        if token:
            try:
                g.user = verify_token(token)
            except AuthError:
                g.user = None
        return view(*args, **kwargs)
    return wrapper


def require_owner(view):
    """Must be stacked under require_auth."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = g.get('user')
        if not user or user.get('role') != ROLE_OWNER:
            raise AuthorizationError("Owner access required")
        return view(*args, **kwargs)
    return wrapper


def current_user_id():
    user = g.get('user')
    return user['id'] if user else None
