"""Thin glue between the ceremonies and `fido2.server.Fido2Server`."""

from fido2 import cbor
from fido2.cose import CoseKey
from fido2.features import webauthn_json_mapping
from fido2.server import Fido2Server
from fido2.utils import websafe_decode
from fido2.webauthn import (
    Aaguid,
    AttestationConveyancePreference,
    AttestedCredentialData,
    AuthenticatorTransport,
    PublicKeyCredentialDescriptor,
    PublicKeyCredentialRpEntity,
    PublicKeyCredentialType,
)

from giftlist.models import Credential
from giftlist.utils import RelyingPartyConfig

# Responses reach the server as base64url JSON; fido2 1.x only decodes that
# shape with the mapping on. It can be set once per process.
webauthn_json_mapping.enabled = True


def build_fido2_server(config: RelyingPartyConfig) -> Fido2Server:
    rp = PublicKeyCredentialRpEntity(id=config.rp_id, name=config.rp_name)
    return Fido2Server(
        rp,
        attestation=AttestationConveyancePreference.NONE,
        verify_origin=config.verify_origin,
    )


def ceremony_state(config: RelyingPartyConfig, challenge: str) -> dict:
    """Rebuild the verifier state for a challenge taken from the store."""
    return {
        "challenge": challenge,
        "user_verification": config.user_verification,
    }


def _transports(values) -> list[AuthenticatorTransport] | None:
    transports = []
    for value in values or []:
        try:
            transports.append(AuthenticatorTransport(value))
        except ValueError:
            continue
    return transports or None


def credential_descriptor(credential: Credential) -> PublicKeyCredentialDescriptor:
    return PublicKeyCredentialDescriptor(
        type=PublicKeyCredentialType.PUBLIC_KEY,
        id=websafe_decode(credential.credential_id),
        transports=_transports(credential.transports),
    )


def attested_credential(credential: Credential) -> AttestedCredentialData:
    public_key = CoseKey.parse(cbor.decode(bytes(credential.public_key)))
    return AttestedCredentialData.create(
        Aaguid.NONE,
        websafe_decode(credential.credential_id),
        public_key,
    )


def encode_public_key(public_key: CoseKey) -> bytes:
    return cbor.encode(dict(public_key))
