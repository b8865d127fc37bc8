from .encryption import SessionEncryption
from .tokens import (
    constant_time_equals,
    generate_csrf_token,
    generate_fingerprint,
    generate_session_id,
    random_string,
)

__all__ = [
    "SessionEncryption",
    "random_string",
    "generate_session_id",
    "generate_csrf_token",
    "generate_fingerprint",
    "constant_time_equals",
]
