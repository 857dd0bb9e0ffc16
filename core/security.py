"""
Security Primitives
===================

Password hashing and signed access tokens.

- PasswordHasher: salted, adaptive bcrypt hashing through passlib.
- TokenAuthority: issues and verifies HS256 JWTs carrying a user id.

Both are configured once at startup from Settings and passed to the
components that need them. Neither reads configuration on its own.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from config import Settings
from exceptions import ExpiredTokenError, InvalidTokenError

Clock = Callable[[], datetime]

# bcrypt reads at most this many bytes of the UTF-8 encoded password
MAX_PASSWORD_BYTES = 72


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Password Hashing
# =============================================================================


class PasswordHasher:
    """
    bcrypt password hashing.

    Every hash gets its own random salt, so hashing the same password
    twice gives two different strings. The work factor is stored inside
    the hash, which lets ``rounds`` be raised later without breaking
    existing users.

    Example:
        >>> hasher = PasswordHasher(rounds=4)
        >>> hashed = hasher.hash("my_secret")
        >>> hasher.verify("my_secret", hashed)
        True
        >>> hasher.verify("wrong_password", hashed)
        False
    """

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
            bcrypt__truncate_error=True,
        )

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            str: Hashed password (includes algorithm, cost and salt)

        Raises:
            passlib.exc.PasswordTruncateError: password is longer than
                MAX_PASSWORD_BYTES once encoded
        """
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against a hash.

        Args:
            plain_password: Plain text password to verify
            hashed_password: Hashed password to compare against

        Returns:
            bool: True if password matches
        """
        # Would be truncated, so it can only match by sharing a prefix
        if len(plain_password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            return False
        return self._context.verify(plain_password, hashed_password)

    def dummy_verify(self) -> None:
        """Spend the same time as a real verify. Used for unknown usernames."""
        self._context.dummy_verify()


# =============================================================================
# Token Authority
# =============================================================================


class TokenAuthority:
    """
    Issues and verifies signed, time-bound identity tokens.

    Tokens are JWTs with three claims: ``sub`` (user id), ``iat`` and
    ``exp`` (both integer UNIX timestamps). They are not stored anywhere;
    the only ways to invalidate one are waiting for expiry or rotating
    the secret.

    Args:
        secret_key: Server-held signing secret
        algorithm: JWS algorithm (HMAC family)
        expires_delta: Token lifetime
        clock: Returns the current aware UTC datetime
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(minutes=60),
        clock: Optional[Clock] = None,
    ):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.expires_delta = expires_delta
        self._clock = clock or utc_now

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenAuthority":
        return cls(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            expires_delta=timedelta(minutes=settings.jwt_access_token_expire_minutes),
        )

    def issue(self, user_id: str) -> str:
        """
        Create a signed access token for a user.

        The same secret, user id and issue time always give the same token.

        Args:
            user_id: Identifier to bind into the ``sub`` claim

        Returns:
            str: The encoded JWT
        """
        issued_at = self._clock()
        expire = issued_at + self.expires_delta

        claims = {
            "sub": user_id,
            "iat": int(issued_at.timestamp()),
            "exp": int(expire.timestamp()),
        }

        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """
        Verify a token and return the user id it was issued for.

        The signature is checked before any claim is read. Expiry is then
        checked against this authority's clock.

        Args:
            token: The JWT token string

        Returns:
            str: The ``sub`` claim

        Raises:
            InvalidTokenError: Malformed token, bad signature or missing claims
            ExpiredTokenError: Token is past its ``exp``
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise InvalidTokenError() from e

        user_id = payload.get("sub")
        expires_at = payload.get("exp")

        if not isinstance(user_id, str) or not user_id:
            raise InvalidTokenError("Token has no subject")
        if not isinstance(expires_at, int):
            raise InvalidTokenError("Token has no expiry")

        if int(self._clock().timestamp()) >= expires_at:
            raise ExpiredTokenError()

        return user_id
