import secrets
from collections.abc import Mapping
from enum import Enum
from typing import Any

from django.core.cache import cache
from fido2.utils import websafe_decode, websafe_encode

CEREMONY_CONTEXT_TTL_SECONDS = 300
CEREMONY_CONTEXT_PREFIX = "giftlist:webauthn"

KNOWN_TRANSPORTS = {"usb", "nfc", "ble", "hybrid", "internal", "smart-card"}


def _ceremony_context_key(flow: str, nonce: str) -> str:
    return f"{CEREMONY_CONTEXT_PREFIX}:{flow}:{nonce}"


def webauthn_store_context(flow: str, payload: dict, ttl_seconds: int = CEREMONY_CONTEXT_TTL_SECONDS) -> str:
    """
    Remember who a ceremony is for between its begin and complete requests.

    Only routing data (user id, display name, invite token, device name) is
    kept here. Challenges live in the challenge store.
    """
    nonce = secrets.token_urlsafe(32)
    cache.set(_ceremony_context_key(flow, nonce), payload, timeout=ttl_seconds)
    return nonce


def webauthn_pop_context(flow: str, nonce: str) -> dict | None:
    key = _ceremony_context_key(flow, nonce)
    payload = cache.get(key)
    if payload:
        cache.delete(key)
    return payload


def webauthn_json_bytes_to_bytes(value: Any) -> bytes:
    """
    Convert a JSON WebAuthn binary field into raw bytes.

    Supported inputs:
    - list[int]: JSON byte array
    - str: base64url (padding optional)
    """
    if isinstance(value, list):
        return bytes(value)

    if isinstance(value, str):
        return websafe_decode(value.rstrip("="))

    raise ValueError("Unsupported WebAuthn binary value type")


def webauthn_normalize_credential_id(value: Any) -> str:
    """
    Normalize a credential id coming from the frontend into canonical base64url (no padding).

    Credentials are stored under this form, so lookups work whether the
    frontend sends a byte-array, padded or unpadded base64url.
    """
    if isinstance(value, (list, str)):
        raw = webauthn_json_bytes_to_bytes(value)
        if not raw:
            raise ValueError("Empty credential id")
        return websafe_encode(raw)

    raise ValueError("Unsupported credential id value type")


def webauthn_make_json_safe(value: Any) -> Any:
    """Recursively convert WebAuthn option objects into JSON-friendly data."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return websafe_encode(bytes(value))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {key: webauthn_make_json_safe(val) for key, val in value.items() if val is not None}
    if isinstance(value, (list, tuple, set)):
        return [webauthn_make_json_safe(item) for item in value]
    return value


def webauthn_clean_transports(value: Any) -> list[str]:
    """Keep only well-formed, known transport hints."""
    if not isinstance(value, (list, tuple)):
        return []
    return sorted({t for t in value if isinstance(t, str) and t in KNOWN_TRANSPORTS})


def webauthn_attestation_payload(credential: Mapping) -> dict:
    """
    Rebuild a registration response in the JSON shape fido2 expects.

    Raises ValueError when a required field is missing or undecodable.
    """
    response = credential.get("response") or {}
    raw_id = credential.get("rawId") or credential.get("id")
    client_data = response.get("clientDataJSON")
    attestation_object = response.get("attestationObject")
    if not raw_id or not client_data or not attestation_object:
        raise ValueError("Missing attestation data")

    credential_id = webauthn_normalize_credential_id(raw_id)
    return {
        "id": credential_id,
        "rawId": credential_id,
        "type": "public-key",
        "response": {
            "clientDataJSON": websafe_encode(webauthn_json_bytes_to_bytes(client_data)),
            "attestationObject": websafe_encode(webauthn_json_bytes_to_bytes(attestation_object)),
        },
    }


def webauthn_assertion_payload(credential: Mapping) -> dict:
    """
    Rebuild an authentication response in the JSON shape fido2 expects.

    Raises ValueError when a required field is missing or undecodable.
    """
    response = credential.get("response") or {}
    raw_id = credential.get("rawId") or credential.get("id")
    client_data = response.get("clientDataJSON")
    auth_data = response.get("authenticatorData")
    signature = response.get("signature")
    if not raw_id or not client_data or not auth_data or not signature:
        raise ValueError("Missing assertion data")

    credential_id = webauthn_normalize_credential_id(raw_id)
    payload = {
        "id": credential_id,
        "rawId": credential_id,
        "type": "public-key",
        "response": {
            "clientDataJSON": websafe_encode(webauthn_json_bytes_to_bytes(client_data)),
            "authenticatorData": websafe_encode(webauthn_json_bytes_to_bytes(auth_data)),
            "signature": websafe_encode(webauthn_json_bytes_to_bytes(signature)),
        },
    }
    user_handle = response.get("userHandle")
    if user_handle:
        payload["response"]["userHandle"] = websafe_encode(webauthn_json_bytes_to_bytes(user_handle))
    return payload
