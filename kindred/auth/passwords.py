import logging

from passlib.context import CryptContext

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> tuple[bool, str | None]:
    """Check ``plain`` against ``hashed``.

    Returns ``(matched, new_hash)``; ``new_hash`` is set when the stored hash
    uses outdated parameters and should be replaced.
    """
    try:
        return pwd_context.verify_and_update(plain, hashed)
    except ValueError:
        logger.warning("Stored password hash has an unrecognized format")
        return False, None


def dummy_verify() -> None:
    # Spend the same time as a real check when the account does not exist.
    pwd_context.dummy_verify()
