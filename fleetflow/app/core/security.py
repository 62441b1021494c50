"""
PIN hashing utilities.

Login PINs are short numeric secrets, so they are only ever stored as bcrypt
hashes and compared server-side.
"""

import bcrypt

from fleetflow.app.core.config import settings


def is_valid_pin(pin: str) -> bool:
    """A PIN is exactly `settings.pin_length` ASCII digits."""
    return len(pin) == settings.pin_length and pin.isascii() and pin.isdigit()


def get_pin_hash(pin: str) -> str:
    """Hash a PIN with a fresh bcrypt salt."""
    return bcrypt.hashpw(pin.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_pin(plain_pin: str, hashed_pin: str) -> bool:
    """Verify a PIN against its stored hash."""
    if not hashed_pin:
        return False
    try:
        return bcrypt.checkpw(plain_pin.encode("utf-8"), hashed_pin.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        return False
