"""
Pytest fixtures for the Circle SDK tests.
"""
import base64

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from circle_sdk._log import clear_rate_limit_cache
from circle_sdk.crypto import EntitySecretEncryptor
from circle_sdk.ops import CircleOps
from circle_sdk.transport import HttpClient
from circle_sdk.view import CircleView

TEST_BASE_URL = "https://api.circle.test"
TEST_API_KEY = "TEST_API_KEY:abc123:def456"
TEST_ENTITY_SECRET = "a1" * 32
TEST_WALLET_ID = "0189bc61-7fe4-70f3-8a1b-0d14426397cb"
TEST_IDEMPOTENCY_KEY = "1f4c8b1e-5b2f-4d53-9a8e-7c2d5b3e9f10"


@pytest.fixture(autouse=True)
def _reset_rate_limit_cache():
    """Each test starts with an empty rate-limited log cache."""
    clear_rate_limit_cache()
    yield
    clear_rate_limit_cache()


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def pkcs1_pem(rsa_private_key):
    """Public key as a PKCS#1 ``RSA PUBLIC KEY`` block."""
    return rsa_private_key.public_key().public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.PKCS1
    ).decode("ascii")


@pytest.fixture(scope="session")
def spki_pem(rsa_private_key):
    """Public key as a SubjectPublicKeyInfo ``PUBLIC KEY`` block."""
    return rsa_private_key.public_key().public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode("ascii")


@pytest.fixture(scope="session")
def decrypt(rsa_private_key):
    """Return a helper that decrypts a base64 ciphertext with the test key."""
    def _decrypt(ciphertext_b64):
        return rsa_private_key.decrypt(
            base64.b64decode(ciphertext_b64),
            padding.OAEP(
                mgf=padding.MGF1(algorithm=hashes.SHA256()),
                algorithm=hashes.SHA256(),
                label=None,
            ),
        )
    return _decrypt


@pytest.fixture(scope="session")
def encryptor(spki_pem):
    return EntitySecretEncryptor(TEST_ENTITY_SECRET, spki_pem)


@pytest.fixture
def http_client():
    client = HttpClient(TEST_BASE_URL, api_key=TEST_API_KEY)
    yield client
    client.close()


@pytest.fixture
def ops(http_client, encryptor):
    return CircleOps(http_client, encryptor)


@pytest.fixture
def view(http_client):
    return CircleView(http_client)
