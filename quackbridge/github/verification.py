"""
Copilot Request Verification

Checks the ECDSA signature GitHub attaches to every Copilot agent request
and parses the verified body.

GitHub signs the raw request body with a P-256 key. The signature arrives
base64-encoded (DER) in ``Github-Public-Key-Signature`` and the key is named
by ``Github-Public-Key-Identifier``. Public keys are fetched from the GitHub
API and cached per verifier. An unknown identifier triggers a refresh, which
covers key rotation.
"""

import base64
import binascii
import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from pydantic import BaseModel, ConfigDict, ValidationError

from quackbridge.github.client import GitHubAPIError, GitHubClient
from quackbridge.github.models import CopilotRequestPayload

logger = logging.getLogger(__name__)


class VerificationResult(BaseModel):
    """Outcome of verifying one request."""

    is_valid: bool
    payload: CopilotRequestPayload | None = None

    model_config = ConfigDict(frozen=True)


class RequestVerifier:
    """
    Verify Copilot agent request signatures.

    Usage:
        verifier = RequestVerifier(GitHubClient())
        result = await verifier.verify_and_parse(body, signature, key_id, token=token)
        if not result.is_valid:
            ...  # respond 401
    """

    def __init__(self, github: GitHubClient):
        self.github = github
        self._keys: dict[str, ec.EllipticCurvePublicKey] = {}

    async def verify(
        self,
        body: bytes,
        signature: str,
        key_id: str,
        token: str | None = None,
    ) -> bool:
        """Return True when ``signature`` is a valid signature of ``body``."""
        if not signature or not key_id:
            logger.warning("Request is missing signature headers")
            return False

        try:
            public_key = await self._get_key(key_id, token)
        except GitHubAPIError as e:
            logger.error(f"Could not fetch Copilot public keys: {e}")
            return False
        if public_key is None:
            logger.warning("No public key found matching key identifier", extra={"key_id": key_id})
            return False

        try:
            raw_signature = base64.b64decode(signature, validate=True)
        except (binascii.Error, ValueError):
            logger.warning("Signature header is not valid base64")
            return False

        try:
            public_key.verify(raw_signature, body, ec.ECDSA(hashes.SHA256()))
        except InvalidSignature:
            return False
        return True

    async def verify_and_parse(
        self,
        body: bytes,
        signature: str,
        key_id: str,
        token: str | None = None,
    ) -> VerificationResult:
        """Verify the signature, then parse the body into a payload."""
        if not await self.verify(body, signature, key_id, token=token):
            return VerificationResult(is_valid=False)
        try:
            payload = CopilotRequestPayload.model_validate_json(body)
        except ValidationError as e:
            logger.warning(f"Verified request body is not a Copilot payload: {e}")
            return VerificationResult(is_valid=False)
        return VerificationResult(is_valid=True, payload=payload)

    async def _get_key(self, key_id: str, token: str | None) -> ec.EllipticCurvePublicKey | None:
        if key_id not in self._keys:
            await self._refresh_keys(token)
        return self._keys.get(key_id)

    async def _refresh_keys(self, token: str | None) -> None:
        keys: dict[str, ec.EllipticCurvePublicKey] = {}
        for entry in await self.github.get_copilot_public_keys(token):
            try:
                loaded = serialization.load_pem_public_key(entry.key.encode("utf-8"))
            except ValueError as e:
                logger.warning(f"Skipping unreadable public key {entry.key_identifier}: {e}")
                continue
            if isinstance(loaded, ec.EllipticCurvePublicKey):
                keys[entry.key_identifier] = loaded
        self._keys = keys
        logger.debug("Refreshed Copilot public keys", extra={"key_count": len(keys)})
