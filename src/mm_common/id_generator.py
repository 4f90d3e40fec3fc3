"""Member code generator.

Member codes are 5-digit numeric strings (10000-99999) shown to members and
used as the login subject. Uniqueness is enforced by the members primary key;
callers retry on collision.
"""

import secrets

_LOW = 10_000
_SPAN = 90_000


def generate_member_id() -> str:
    """Return a random 5-digit member code."""
    return str(_LOW + secrets.randbelow(_SPAN))
