"""비밀번호 해싱 및 검증 유틸리티 모듈.

Password hashing and verification utility module.
Uses bcrypt directly for secure password storage.
Passwords are never stored in plain text — always hashed with bcrypt.
The configured cost factor (PASSWORD_HASH_ROUNDS) is embedded in each hash,
which lets sign-in detect hashes created with an older, weaker setting.
"""

import bcrypt

from app.config import settings


def hash_password(password: str) -> str:
    """평문 비밀번호를 bcrypt 해시로 변환합니다.

    Hash a plain text password using bcrypt with the configured cost factor.
    The resulting hash includes a random salt, making each hash unique
    even for identical passwords.

    Args:
        password: 평문 비밀번호 (Plain text password to hash)

    Returns:
        str: bcrypt 해시 문자열 (Bcrypt hash string, ~60 chars)

    Example:
        hashed = hash_password("my-secret-password")
        # "$2b$12$LJ3m4ys3..."
    """
    salt: bytes = bcrypt.gensalt(rounds=settings.PASSWORD_HASH_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """평문 비밀번호와 bcrypt 해시를 비교 검증합니다.

    Verify a plain text password against a bcrypt hash.
    Uses constant-time comparison to prevent timing attacks.
    Malformed stored hashes never match.

    Args:
        plain_password: 검증할 평문 비밀번호 (Plain text password to verify)
        hashed_password: 저장된 bcrypt 해시 (Stored bcrypt hash to compare against)

    Returns:
        bool: 일치하면 True, 불일치하면 False (True if password matches hash)
    """
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"), hashed_password.encode("utf-8")
        )
    except ValueError:
        return False


def get_hash_rounds(hashed_password: str) -> int | None:
    """bcrypt 해시에 기록된 비용 계수를 반환합니다.

    Extract the cost factor from a modular-crypt bcrypt hash
    ("$2b$<rounds>$<salt+hash>"). Returns None for unrecognised formats.
    """
    parts: list[str] = hashed_password.split("$")
    if len(parts) != 4 or not parts[2].isdigit():
        return None
    return int(parts[2])


def needs_rehash(hashed_password: str) -> bool:
    """해시가 현재 설정보다 약한 비용 계수로 생성되었는지 확인합니다.

    True when the stored hash uses fewer rounds than PASSWORD_HASH_ROUNDS,
    or when its format is not recognised at all.
    """
    rounds: int | None = get_hash_rounds(hashed_password)
    return rounds is None or rounds < settings.PASSWORD_HASH_ROUNDS
