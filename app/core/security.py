"""Credential hashing and JWT issuing."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext


class PasswordHasher:
    """One-way password hashing backed by passlib (bcrypt)."""

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        return self._context.verify(plain_password, hashed_password)


class JwtTokenProvider:
    """Mints and decodes signed, time-bounded identity tokens.

    Tokens carry the subject (the user's email) in ``sub`` and the role
    claim in ``role``.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expiration_minutes: int = 60):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expiration = timedelta(minutes=expiration_minutes)

    def generate_token(self, subject: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
        issued_at = datetime.now(timezone.utc)
        claims = {
            "sub": subject,
            "role": role,
            "iat": issued_at,
            "exp": issued_at + (expires_delta or self.expiration),
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Optional[dict]:
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None
