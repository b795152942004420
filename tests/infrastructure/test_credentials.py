"""Tests for the basic-auth credential adapter."""

import base64

import pytest

from catalog_api.domain.exceptions import UnauthenticatedError
from catalog_api.infrastructure.credentials import (
    CredentialVerifier,
    decode_basic_auth,
    encode_basic_auth,
)
from catalog_api.infrastructure.record_store import InMemoryRecordStore, RecordKind


class TestDecodeBasicAuth:
    """Tests for header decoding."""

    def test_round_trip(self) -> None:
        """Encoded credentials decode back."""
        assert decode_basic_auth(encode_basic_auth("5550100", "se:cret")) == ("5550100", "se:cret")

    @pytest.mark.parametrize(
        "header",
        [
            None,
            "",
            "Bearer abc",
            "Basic !!!not-base64!!!",
            "Basic " + base64.b64encode(b"no-colon").decode(),
            "Basic " + base64.b64encode(b":password").decode(),
        ],
    )
    def test_malformed(self, header: str | None) -> None:
        """Missing or malformed headers are rejected."""
        with pytest.raises(UnauthenticatedError):
            decode_basic_auth(header)


class TestCredentialVerifier:
    """Tests for CredentialVerifier."""

    @pytest.fixture
    async def verifier(self, store: InMemoryRecordStore) -> CredentialVerifier:
        """Verifier with one stored user."""
        await store.create(RecordKind.USER, {"name": "Asha", "phone": "5550100", "password": "secret"})
        return CredentialVerifier(store)

    @pytest.mark.asyncio
    async def test_authenticates(self, verifier: CredentialVerifier) -> None:
        """Matching credentials resolve to the user."""
        user = await verifier.authenticate(encode_basic_auth("5550100", "secret"))
        assert user.name == "Asha"

    @pytest.mark.asyncio
    async def test_unknown_user(self, verifier: CredentialVerifier) -> None:
        """Unknown phones are rejected."""
        with pytest.raises(UnauthenticatedError, match="User not found"):
            await verifier.authenticate(encode_basic_auth("000", "secret"))

    @pytest.mark.asyncio
    async def test_wrong_password(self, verifier: CredentialVerifier) -> None:
        """Passwords are compared verbatim."""
        with pytest.raises(UnauthenticatedError, match="Invalid password"):
            await verifier.authenticate(encode_basic_auth("5550100", "Secret"))
