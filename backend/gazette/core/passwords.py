import bcrypt

# bcrypt only looks at the first 72 bytes of a secret
BCRYPT_MAX_BYTES = 72
PASSWORD_TOO_LONG = f"Password must not exceed {BCRYPT_MAX_BYTES} bytes"


def fits_bcrypt(password: str) -> bool:
    """True when bcrypt sees the whole password (UTF-8 length, not characters)."""
    return len(password.encode("utf-8")) <= BCRYPT_MAX_BYTES


def hash_password(password: str) -> str:
    """Hash a plaintext password with a fresh salt.

    Raises:
        ValueError: password longer than bcrypt's input limit
    """
    if not fits_bcrypt(password):
        raise ValueError(PASSWORD_TOO_LONG)
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    # Over-long input could only match through truncation
    if not password_hash or not fits_bcrypt(password):
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        return False
