# services/auth_service.py

import logging
import secrets
import time

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from models.user import User, ROLE_OWNER, ROLE_USER
from .errors import AuthError, AuthorizationError, ValidationError
from .validators import is_strong_password, normalize_email, sanitize_string, validate_name

logger = logging.getLogger(__name__)

TOKEN_SALT = 'slotbook-auth'
# Hard ceiling on token age; each token also carries its own shorter ttl
MAX_TOKEN_AGE_SECONDS = 30 * 24 * 3600


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def issue_token(user, ttl_seconds):
    claims = {
        'id': user.id,
        'email': user.email,
        'role': user.role,
        'name': user.name,
        'ttl': int(ttl_seconds),
    }
    return _serializer().dumps(claims)


def verify_token(token):
    """Return the token claims or raise AuthError."""
    try:
        claims, issued_at = _serializer().loads(
            token, max_age=MAX_TOKEN_AGE_SECONDS, return_timestamp=True
        )
    except SignatureExpired:
        raise AuthError("Token expired")
    except BadSignature:
        raise AuthError("Invalid token")

    age = time.time() - issued_at.timestamp()
    if age > claims.get('ttl', 0):
        raise AuthError("Token expired")
    return claims


def unusable_password_hash():
    """Hash of a random secret nobody knows; guest accounts cannot log in with it."""
    return generate_password_hash(f"guest-{secrets.token_hex(16)}")


class AuthService:

    def __init__(self, session):
        self.session = session

    def find_by_email(self, email):
        return self.session.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def register(self, payload):
        name = payload.get('name')
        email = payload.get('email')
        password = payload.get('password')
        if not name or not email or not password:
            raise ValidationError("Name, email, and password are required.")

        name = validate_name(name)
        email = normalize_email(email)
        if not is_strong_password(password):
            raise ValidationError(
                "Password must be at least 8 characters with at least 1 letter and 1 number."
            )

        role = ROLE_USER
        if payload.get('role') == ROLE_OWNER:
            required_secret = current_app.config.get('OWNER_REGISTRATION_SECRET')
            if not required_secret or payload.get('owner_secret') != required_secret:
                raise AuthorizationError("Invalid owner registration credentials.")
            role = ROLE_OWNER

        user = User(name=name, email=email, password_hash=generate_password_hash(password), role=role)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ValidationError("Email already in use.")
        logger.info(f"👤 Registered {role} account {user.id}")
        return user.to_public_dict()

    def _login_response(self, user, ttl_seconds):
        return {
            'token': issue_token(user, ttl_seconds),
            'user': user.to_public_dict(),
        }

    def login(self, payload):
        email = payload.get('email')
        password = payload.get('password')
        if not email or not password:
            raise ValidationError("Email and password are required.")

        user = self.find_by_email(str(email).strip().lower())
        if not user or not check_password_hash(user.password_hash, password):
            raise AuthError("Invalid credentials.")
        return self._login_response(user, current_app.config['USER_TOKEN_TTL_SECONDS'])

    def owner_login(self, payload):
        username = payload.get('username')
        password = payload.get('password')
        if not username or not password:
            raise ValidationError("Username and password are required.")

        user = self.session.execute(
            select(User).where(User.name == sanitize_string(username), User.role == ROLE_OWNER)
        ).scalars().first()
        if not user or not check_password_hash(user.password_hash, password):
            raise AuthError("Invalid credentials.")
        return self._login_response(user, current_app.config['OWNER_TOKEN_TTL_SECONDS'])

    def resolve_customer(self, email, name, authenticated_id=None):
        """Booking customer: the caller if logged in, else the account for email, else a new guest."""
        if authenticated_id:
            return authenticated_id

        user = self.find_by_email(email)
        if user:
            return user.id

        user = User(name=name, email=email, password_hash=unusable_password_hash(), role=ROLE_USER)
        try:
            # savepoint keeps the slot claim if a concurrent booking created this email first
            with self.session.begin_nested():
                self.session.add(user)
        except IntegrityError:
            existing = self.find_by_email(email)
            if existing is None:
                raise
            logger.info(f"👤 Guest account for booking already created concurrently: {existing.id}")
            return existing.id
        logger.info(f"👤 Created guest account {user.id} for booking")
        return user.id

    def seed_admin(self, username, password, email_domain):
        """Create or resync the owner account from configuration."""
        email = f"{username}@{email_domain}".lower()
        user = self.find_by_email(email)
        if user:
            user.name = username
            user.password_hash = generate_password_hash(password)
            user.role = ROLE_OWNER
            action = 'synced'
        else:
            self.session.add(User(
                name=username,
                email=email,
                password_hash=generate_password_hash(password),
                role=ROLE_OWNER,
            ))
            action = 'created'
        self.session.commit()
        logger.info(f"[Seed] Admin account \"{username}\" {action}.")
        return action
