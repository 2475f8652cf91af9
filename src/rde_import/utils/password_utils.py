"""
Password Utilities

Auth info generation for imported domains whose deposit omits the
authorization secret.
"""

import logging
import secrets
import string

logger = logging.getLogger("rde.utils.password")

# Auth info configuration
AUTH_INFO_MIN_LENGTH = 8
AUTH_INFO_MAX_LENGTH = 32
AUTH_INFO_DEFAULT_LENGTH = 16

AUTH_INFO_UPPER = string.ascii_uppercase
AUTH_INFO_LOWER = string.ascii_lowercase
AUTH_INFO_DIGITS = string.digits
AUTH_INFO_SYMBOLS = "!@#$%^&*()?"


def generate_auth_info(length: int = AUTH_INFO_DEFAULT_LENGTH) -> str:
    """
    Generate a random auth info string matching the registry password policy.

    At least 2 uppercase, 2 lowercase, 2 digits and 2 special characters
    (!@#$%^&*()?), length clamped to 8-32.

    Args:
        length: Length of auth info (default 16)

    Returns:
        Random auth info string
    """
    length = max(AUTH_INFO_MIN_LENGTH, min(length, AUTH_INFO_MAX_LENGTH))

    chars = []
    for pool in (AUTH_INFO_UPPER, AUTH_INFO_LOWER, AUTH_INFO_DIGITS, AUTH_INFO_SYMBOLS):
        chars.extend(secrets.choice(pool) for _ in range(2))

    all_chars = AUTH_INFO_UPPER + AUTH_INFO_LOWER + AUTH_INFO_DIGITS + AUTH_INFO_SYMBOLS
    chars.extend(secrets.choice(all_chars) for _ in range(length - len(chars)))

    # Shuffle to avoid predictable pattern
    secrets.SystemRandom().shuffle(chars)

    logger.debug(f"Generated auth info of length {length}")
    return "".join(chars)
