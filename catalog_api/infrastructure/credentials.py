"""Basic-auth credential adapter.

Decodes ``Authorization: Basic base64(phone:password)`` headers and matches
them against stored users. Passwords are compared verbatim, as stored.
"""

import base64
import binascii

import structlog

from catalog_api.domain.entities import User
from catalog_api.domain.exceptions import UnauthenticatedError
from catalog_api.infrastructure.record_store import RecordKind, RecordStore

logger = structlog.get_logger()


def decode_basic_auth(header: str | None) -> tuple[str, str]:
    """Extract phone and password from a Basic authorization header.

    Args:
        header: Raw Authorization header value.

    Returns:
        (phone, password) tuple.

    Raises:
        UnauthenticatedError: If the header is missing or malformed.
    """
    if not header or not header.startswith("Basic "):
        raise UnauthenticatedError("Missing or invalid authorization header")

    try:
        decoded = base64.b64decode(header[6:].strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise UnauthenticatedError("Invalid credentials format") from e

    phone, _, password = decoded.partition(":")
    if not phone or not password:
        raise UnauthenticatedError("Invalid credentials format")
    return phone, password


def encode_basic_auth(phone: str, password: str) -> str:
    """Build a Basic authorization header value."""
    token = base64.b64encode(f"{phone}:{password}".encode()).decode("ascii")
    return f"Basic {token}"


class CredentialVerifier:
    """Resolves basic-auth credentials to a stored user."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def authenticate(self, header: str | None) -> User:
        """Authenticate an Authorization header.

        Raises:
            UnauthenticatedError: On malformed header, unknown phone or wrong password.
        """
        phone, password = decode_basic_auth(header)

        matches = await self.store.find(RecordKind.USER, lambda r: r.get("phone") == phone)
        if not matches:
            logger.warning("Authentication failed: unknown user", phone=phone)
            raise UnauthenticatedError("User not found")

        user = User.from_record(matches[0])
        if user.password != password:
            logger.warning("Authentication failed: wrong password", user_id=user.id)
            raise UnauthenticatedError("Invalid password")
        return user
