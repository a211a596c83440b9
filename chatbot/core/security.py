"""Salted password hashing with bcrypt, run off the event loop."""

import asyncio
from concurrent.futures import ThreadPoolExecutor

import bcrypt

_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="bcrypt")

BCRYPT_ROUNDS = 12

# Compared against when the email is unknown so both paths cost the same.
DUMMY_HASH = bcrypt.hashpw(b"dummy", bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode()


def _hash(password: str) -> str:
    return bcrypt.hashpw(
        password.encode(), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    ).decode()


def _check(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        # Malformed stored hash never matches.
        return False


async def hash_password(password: str) -> str:
    """Hash a password with a fresh salt."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(_executor, _hash, password)


async def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(_executor, _check, plain, hashed)
