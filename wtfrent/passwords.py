import secrets

from werkzeug.security import generate_password_hash, check_password_hash


def hash_password(plaintext):
    return generate_password_hash(plaintext, method="pbkdf2:sha256")


def verify_password(plaintext, hashed):
    return check_password_hash(hashed, plaintext)


def get_reset_token():
    """40 hex characters drawn from 20 random bytes."""
    return secrets.token_hex(20)
