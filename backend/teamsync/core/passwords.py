"""Password hashing. bcrypt via passlib; plaintext is never stored or logged."""

from passlib.hash import bcrypt

MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return bcrypt.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check ``password`` against a stored hash. A missing hash never matches."""
    if not password_hash:
        return False
    try:
        return bcrypt.verify(password, password_hash)
    except ValueError:
        # Malformed hash in storage.
        return False
