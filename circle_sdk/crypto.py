"""
Entity secret encryption for the Circle SDK.

Every write request carries a freshly encrypted copy of the entity secret.
The secret is encrypted with RSA-OAEP (SHA-256 for both the digest and MGF1)
against the entity public key published by Circle, so two encryptions of the
same secret never produce the same ciphertext.
"""
import base64
import binascii
import re
from typing import Callable, List, Tuple

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from .exceptions import DecodeError, EncryptionError, KeyParseError


_PEM_LABEL_RE = re.compile(r"-----BEGIN ([A-Z0-9 ]+)-----")


def _pem_label(public_key_pem: str) -> str:
    match = _PEM_LABEL_RE.search(public_key_pem)
    if not match:
        raise ValueError("no PEM header found")
    return match.group(1)


def _load_rsa_key(public_key_pem: str, expected_label: str) -> rsa.RSAPublicKey:
    label = _pem_label(public_key_pem)
    if label != expected_label:
        raise ValueError(f"expected '{expected_label}' PEM block, found '{label}'")

    key = load_pem_public_key(public_key_pem.encode("ascii"))
    if not isinstance(key, rsa.RSAPublicKey):
        raise ValueError(f"not an RSA key ({type(key).__name__})")
    return key


def parse_pkcs1_public_key(public_key_pem: str) -> rsa.RSAPublicKey:
    """Parse a legacy PKCS#1 ``RSA PUBLIC KEY`` PEM block."""
    return _load_rsa_key(public_key_pem, "RSA PUBLIC KEY")


def parse_spki_public_key(public_key_pem: str) -> rsa.RSAPublicKey:
    """Parse a SubjectPublicKeyInfo (PKCS#8-style) ``PUBLIC KEY`` PEM block."""
    return _load_rsa_key(public_key_pem, "PUBLIC KEY")


# Tried in order; the first strategy that succeeds wins.
PUBLIC_KEY_PARSERS: List[Tuple[str, Callable[[str], rsa.RSAPublicKey]]] = [
    ("PKCS#1", parse_pkcs1_public_key),
    ("PKCS#8", parse_spki_public_key),
]


def parse_public_key(public_key_pem: str) -> rsa.RSAPublicKey:
    """
    Parse an RSA public key from PEM text.

    Args:
        public_key_pem: PEM text in PKCS#1 or SubjectPublicKeyInfo form

    Returns:
        The parsed RSA public key

    Raises:
        KeyParseError: If no parser accepts the key. The error lists the
            failure of every parser that was tried.
    """
    if not isinstance(public_key_pem, str):
        raise KeyParseError(
            f"Public key must be a PEM string, got {type(public_key_pem).__name__}"
        )

    pem = public_key_pem.strip()
    errors = []
    for name, parser in PUBLIC_KEY_PARSERS:
        try:
            return parser(pem)
        except (ValueError, TypeError, UnicodeEncodeError, UnsupportedAlgorithm) as e:
            errors.append(f"{name} error: {e}")

    raise KeyParseError(
        "Failed to parse public key from PEM (tried both PKCS#1 and PKCS#8): "
        + "; ".join(errors),
        errors=errors,
    )


def decode_entity_secret(entity_secret_hex: str) -> bytes:
    """
    Decode a hex-encoded entity secret.

    Only surrounding whitespace is tolerated. Embedded whitespace and a
    ``0x`` prefix are rejected, as is an odd number of digits.

    Raises:
        DecodeError: If the value is not valid hexadecimal
    """
    if not isinstance(entity_secret_hex, str):
        raise DecodeError(
            f"Entity secret must be a hex string, got {type(entity_secret_hex).__name__}"
        )

    try:
        return binascii.unhexlify(entity_secret_hex.strip())
    except (binascii.Error, ValueError) as e:
        # Do not echo the secret itself
        raise DecodeError(f"Failed to decode hex entity secret: {e}") from e


def _oaep_padding() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


def encrypt_with_key(secret: bytes, public_key: rsa.RSAPublicKey) -> str:
    """
    Encrypt raw secret bytes and return the base64 ciphertext.

    Raises:
        EncryptionError: If RSA-OAEP encryption fails
    """
    try:
        ciphertext = public_key.encrypt(secret, _oaep_padding())
    except ValueError as e:
        raise EncryptionError(f"Failed to encrypt data: {e}") from e
    return base64.b64encode(ciphertext).decode("ascii")


def encrypt_entity_secret(entity_secret_hex: str, public_key_pem: str) -> str:
    """
    Encrypt the entity secret for a single request.

    Args:
        entity_secret_hex: Entity secret as a hex string
        public_key_pem: Circle's entity public key in PEM form

    Returns:
        Base64 (standard alphabet, padded) RSA-OAEP ciphertext. A new value is
        produced on every call.

    Raises:
        DecodeError: If the secret is not valid hex
        KeyParseError: If the public key cannot be parsed
        EncryptionError: If encryption fails
    """
    secret = decode_entity_secret(entity_secret_hex)
    public_key = parse_public_key(public_key_pem)
    return encrypt_with_key(secret, public_key)


class EntitySecretEncryptor:
    """
    Holds the entity secret and public key and hands out fresh ciphertexts.

    The key is parsed and the secret decoded once at construction so that a
    bad configuration fails early. Each call to :meth:`ciphertext` draws new
    OAEP randomness, which makes the encryptor safe to share between threads.
    """

    def __init__(self, entity_secret: str, public_key_pem: str):
        self._secret = decode_entity_secret(entity_secret)
        self._public_key = parse_public_key(public_key_pem)
        self.key_size = self._public_key.key_size

    def ciphertext(self) -> str:
        """Return a newly encrypted entity secret ciphertext."""
        return encrypt_with_key(self._secret, self._public_key)

    def __repr__(self) -> str:
        return f"EntitySecretEncryptor(key_size={self.key_size}, secret=[REDACTED])"
