"""Admin password hashing, login checks and first-boot admin creation."""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from typing import Optional

from menu_scheduler.domain.models import AdminUser
from menu_scheduler.domain.repositories import AdminUserRepository
from menu_scheduler.domain.store import EntityStore

_logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000


def hash_password(password: str, salt: Optional[str] = None) -> str:
    salt = salt or secrets.token_hex(16)
    pwd_hash = hashlib.pbkdf2_hmac("sha256", password.encode(), bytes.fromhex(salt), PBKDF2_ITERATIONS).hex()
    return f"{salt}:{pwd_hash}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        salt, stored = password_hash.split(":", 1)
        check = hashlib.pbkdf2_hmac("sha256", password.encode(), bytes.fromhex(salt), PBKDF2_ITERATIONS).hex()
    except ValueError:
        return False
    return hmac.compare_digest(check, stored)


def authenticate(store: EntityStore, username: str, password: str) -> Optional[AdminUser]:
    """Return the admin user when the credentials match, otherwise None."""
    user = AdminUserRepository.get_by_username(store, username)
    if user is None or not verify_password(password, user.password_hash):
        _logger.debug("Login rejected for username %r", username)
        return None
    return user


def create_default_admin(store: EntityStore, username: str = "admin", password: str = "admin123") -> Optional[AdminUser]:
    """
    Create the default admin account when no admin user exists.

    Returns the new user, or None when accounts already exist.
    """
    if store.admin_users.list():
        _logger.debug("Admin users already exist, skipping creation")
        return None
    user = AdminUserRepository.create(store, username, hash_password(password))
    _logger.info("Default admin user created: username=%r", username)
    return user
