"""
Borsh encoding of NEAR delegate actions for the sign/delegateAction endpoint.

NEAR delegate actions must be serialized with borsh, not JSON. The encoded
bytes are prefixed with the NEP-461 message tag for actionable delegate
messages and then base64-encoded so they can travel inside a JSON body.
"""
import base64
import struct
from typing import Iterable

import base58

from ..exceptions import DecodeError
from .types import (
    AccessKey, AddKey, CreateAccount, DelegateAction, DeleteAccount, DeleteKey,
    DeployContract, FullAccessPermission, FunctionCall, FunctionCallPermission,
    KeyType, NearPublicKey, Stake, Transfer,
)

# 2**30 + 461: NEP-461 tag for an actionable on-chain delegate message.
# A signature over the prefixed bytes cannot be replayed as a signature
# over any other message type.
NEP_461_PREFIX = 0x40000000 + 461
NEP_461_PREFIX_BYTES = struct.pack("<I", NEP_461_PREFIX)

_ACTION_TYPES = (
    CreateAccount, DeployContract, FunctionCall, Transfer,
    Stake, AddKey, DeleteKey, DeleteAccount,
)


def _u8(value: int) -> bytes:
    return value.to_bytes(1, "little")


def _u32(value: int) -> bytes:
    return value.to_bytes(4, "little")


def _u64(value: int) -> bytes:
    return value.to_bytes(8, "little")


def _u128(value: int) -> bytes:
    return value.to_bytes(16, "little")


def _bytes(value: bytes) -> bytes:
    return _u32(len(value)) + value


def _string(value: str) -> bytes:
    return _bytes(value.encode("utf-8"))


def _vec(items: Iterable[bytes]) -> bytes:
    items = list(items)
    return _u32(len(items)) + b"".join(items)


def _public_key(key: NearPublicKey) -> bytes:
    return _u8(int(key.key_type)) + key.data


def _access_key(access_key: AccessKey) -> bytes:
    permission = access_key.permission
    result = _u64(access_key.nonce) + _u8(permission.discriminant)

    if isinstance(permission, FunctionCallPermission):
        if permission.allowance is None:
            result += _u8(0)
        else:
            result += _u8(1) + _u128(permission.allowance)
        result += _string(permission.receiver_id)
        result += _vec(_string(name) for name in permission.method_names)
    elif not isinstance(permission, FullAccessPermission):
        raise TypeError(f"Unsupported access key permission: {type(permission).__name__}")

    return result


def serialize_action(action) -> bytes:
    """Serialize a single non-delegate action as its discriminant plus fields."""
    if not isinstance(action, _ACTION_TYPES):
        raise TypeError(f"Unsupported delegate sub-action: {type(action).__name__}")

    result = _u8(action.discriminant)
    if isinstance(action, CreateAccount):
        pass
    elif isinstance(action, DeployContract):
        result += _bytes(action.code)
    elif isinstance(action, FunctionCall):
        result += _string(action.method_name)
        result += _bytes(action.args)
        result += _u64(action.gas)
        result += _u128(action.deposit)
    elif isinstance(action, Transfer):
        result += _u128(action.deposit)
    elif isinstance(action, Stake):
        result += _u128(action.stake)
        result += _public_key(action.public_key)
    elif isinstance(action, AddKey):
        result += _public_key(action.public_key)
        result += _access_key(action.access_key)
    elif isinstance(action, DeleteKey):
        result += _public_key(action.public_key)
    elif isinstance(action, DeleteAccount):
        result += _string(action.beneficiary_id)

    return result


def serialize_delegate_action(action: DelegateAction) -> bytes:
    """
    Borsh-serialize a delegate action without the NEP-461 prefix.

    The output is a pure function of the input: equal actions always produce
    identical bytes.
    """
    result = _string(action.sender_id)
    result += _string(action.receiver_id)
    result += _vec(serialize_action(a) for a in action.actions)
    result += _u64(action.nonce)
    result += _u64(action.max_block_height)
    result += _public_key(action.public_key)
    return result


def encode_delegate_action(action: DelegateAction) -> str:
    """
    Encode a delegate action for the ``unsignedDelegateAction`` request field.

    Args:
        action: The delegate action to encode

    Returns:
        Base64 (standard alphabet, padded) of the NEP-461 prefix followed by
        the borsh-serialized action
    """
    return base64.b64encode(NEP_461_PREFIX_BYTES + serialize_delegate_action(action)).decode("ascii")


def _parse_prefixed_public_key(value: str) -> NearPublicKey:
    algorithm, sep, encoded = value.partition(":")
    if not sep:
        raise DecodeError("missing '<algorithm>:' prefix")

    try:
        key_type = KeyType[algorithm.upper()]
    except KeyError:
        raise DecodeError(f"unknown key algorithm {algorithm!r}")

    try:
        data = base58.b58decode(encoded)
    except ValueError as e:
        raise DecodeError(f"invalid base58 key data: {e}") from e

    try:
        return NearPublicKey(key_type, data)
    except ValueError as e:
        raise DecodeError(str(e)) from e


def parse_near_public_key(value: str) -> NearPublicKey:
    """
    Parse a NEAR public key.

    The explicitly prefixed form (``ed25519:<base58>`` or
    ``secp256k1:<base58>``) is tried first. Only a value without any prefix is
    then retried as a bare ed25519 key; a value that names an algorithm is
    never reinterpreted as a different one.

    Args:
        value: Public key text

    Returns:
        Parsed public key

    Raises:
        DecodeError: If the key cannot be parsed
    """
    value = value.strip()
    try:
        return _parse_prefixed_public_key(value)
    except DecodeError as e:
        if ":" in value:
            raise DecodeError(f"Failed to parse NEAR public key: {e}") from e

    # Bare keys are assumed to be ed25519
    try:
        return _parse_prefixed_public_key(f"{KeyType.ED25519.prefix}:{value}")
    except DecodeError as e:
        raise DecodeError(f"Failed to parse NEAR public key: {e}") from e
