import os

from django.test import SimpleTestCase
from fido2.features import webauthn_json_mapping
from fido2.utils import websafe_encode

from giftlist.services.fido import build_fido2_server, ceremony_state
from giftlist.tests.authenticator import SoftwareAuthenticator
from giftlist.utils import RelyingPartyConfig
from giftlist.utils.webauthn import webauthn_attestation_payload

CONFIG = RelyingPartyConfig(
    rp_id="localhost",
    rp_name="Giftlist",
    origin="http://localhost:3000",
)


class Fido2ServerTest(SimpleTestCase):
    def test_json_mapping_is_enabled(self):
        self.assertTrue(webauthn_json_mapping.enabled)

    def test_verifies_base64url_registration_response(self):
        challenge = websafe_encode(os.urandom(32))
        options = {"rp": {"id": "localhost"}, "user": {"id": websafe_encode(b"u1")}, "challenge": challenge}
        response = SoftwareAuthenticator().make_credential(options)

        auth_data = build_fido2_server(CONFIG).register_complete(
            ceremony_state(CONFIG, challenge),
            webauthn_attestation_payload(response),
        )

        self.assertIsNotNone(auth_data.credential_data)
        self.assertEqual(auth_data.counter, 0)
