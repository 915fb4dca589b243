"""
Short opaque identifiers for activities, objectives and news items.
"""

import secrets
import string

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 7


def generate_id() -> str:
    """Return a random 7-character base-36 token (e.g., "k3j9x2a")."""
    return ''.join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def prefixed_id(prefix: str) -> str:
    """Return an identifier such as "act_k3j9x2a" for the given prefix."""
    return f"{prefix}_{generate_id()}"
