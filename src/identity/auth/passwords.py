"""Password hashing with bcrypt."""

import os

import bcrypt

# Lowered in the test suite; bcrypt accepts 4..31
BCRYPT_ROUNDS = int(os.getenv("MARKET_BCRYPT_ROUNDS", "10"))


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
