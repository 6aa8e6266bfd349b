import base64
import secrets

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from locker.configs.settings import settings

ALGORITHM = "pbkdf2_sha256"
SALT_BYTES = 16
KEY_LENGTH = 32


def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )


def hash_password(password: str, iterations: int | None = None) -> str:
    """Encode as ``pbkdf2_sha256$iterations$salt$hash`` with base64 parts"""
    rounds = iterations or settings.SHARE_PASSWORD_ITERATIONS
    salt = secrets.token_bytes(SALT_BYTES)
    derived = _kdf(salt, rounds).derive(password.encode("utf-8"))
    return "$".join([
        ALGORITHM,
        str(rounds),
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(derived).decode("ascii"),
    ])


def verify_password(password: str, encoded: str) -> bool:
    """Constant-time check of a candidate against a stored hash"""
    try:
        algorithm, rounds, salt_b64, hash_b64 = encoded.split("$")
        if algorithm != ALGORITHM:
            return False
        salt = base64.b64decode(salt_b64)
        expected = base64.b64decode(hash_b64)
        _kdf(salt, int(rounds)).verify(password.encode("utf-8"), expected)
        return True
    except (InvalidKey, ValueError):
        return False
