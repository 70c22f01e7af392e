import logging
import re
import secrets
import string

from flask_jwt_extended import create_access_token
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from workoutlogger.errors import Unauthorized, ValidationFailure
from workoutlogger.models.user import User

logger = logging.getLogger(__name__)

SPECIAL_CHARACTERS = "!@#$%^&*()"
GUEST_PASSWORD_LENGTH = 12


def validate_password(password, policy):
    """Return every policy rule ``password`` breaks, empty when it passes."""
    errors = []
    if len(password) < policy.get("PASSWORD_MIN_LENGTH", 8):
        errors.append(f"Password must be at least {policy.get('PASSWORD_MIN_LENGTH', 8)} characters")
    if policy.get("PASSWORD_REQUIRE_UPPERCASE", True) and not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if policy.get("PASSWORD_REQUIRE_LOWERCASE", True) and not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if policy.get("PASSWORD_REQUIRE_NUMBERS", True) and not re.search(r"\d", password):
        errors.append("Password must contain at least one number")
    if policy.get("PASSWORD_REQUIRE_SPECIAL", True) and not re.search(r"[^A-Za-z0-9]", password):
        errors.append("Password must contain at least one special character")
    return errors


def generate_guest_password(length=GUEST_PASSWORD_LENGTH):
    """Random password with at least one character from each required class."""
    pools = [string.ascii_uppercase, string.ascii_lowercase, string.digits, SPECIAL_CHARACTERS]
    alphabet = "".join(pools)
    chars = [secrets.choice(pool) for pool in pools]
    chars += [secrets.choice(alphabet) for _ in range(length - len(chars))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


class AuthGateway:
    """Issues bearer tokens for registered users and guest identities.

    Tokens carry the username as ``sub`` plus a unique ``jti``; expiry and
    signing come from the JWT settings on the Flask app. Methods return
    ``(token, error)``.
    """

    def __init__(self, session: Session, config):
        self.session = session
        self.config = config

    @property
    def guest_prefix(self):
        return self.config.get("GUEST_USERNAME_PREFIX", "guest_")

    def find_user(self, username):
        return self.session.query(User).filter_by(username=username).first()

    def issue_token(self, user):
        return create_access_token(identity=user.username)

    def login(self, username, password):
        username = (username or "").strip()
        user = self.find_user(username) if username else None
        if user is None or not password or not user.check_password(password):
            logger.info("Login failed for %r", username)
            return None, Unauthorized("Invalid credentials")

        logger.info("Login successful for %s", user.username)
        return self.issue_token(user), None

    def register(self, username, password):
        username = (username or "").strip()
        if not username or not password:
            return None, ValidationFailure("Username and password are required.")

        errors = []
        if username.startswith(self.guest_prefix):
            errors.append(f"Usernames starting with '{self.guest_prefix}' are reserved.")
        elif self.find_user(username) is not None:
            errors.append(f"Username '{username}' is already taken.")
        errors += validate_password(password, self.config)
        if errors:
            return None, ValidationFailure("Failed to create user: " + ", ".join(errors), errors=errors)

        user = User(username=username, is_guest=False)
        user.set_password(password)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            msg = f"Username '{username}' is already taken."
            return None, ValidationFailure("Failed to create user: " + msg, errors=[msg])

        logger.info("Registered user %s", username)
        return self.issue_token(user), None

    def guest_login(self, guest_id):
        guest_id = (guest_id or "").strip()
        if not guest_id:
            return None, ValidationFailure("GuestId is required.")

        username = f"{self.guest_prefix}{guest_id}"
        user = self.find_user(username)
        if user is None:
            user = self._create_guest(username)

        return self.issue_token(user), None

    def _create_guest(self, username):
        user = User(username=username, is_guest=True)
        user.set_password(generate_guest_password())
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            # Another request created the same guest first; reuse it
            self.session.rollback()
            existing = self.find_user(username)
            if existing is None:
                raise
            return existing

        logger.info("Created guest identity %s", username)
        return user
