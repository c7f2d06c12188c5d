"""
Data types for NEAR delegate actions.

Field order in every class below is the order in which the field is written
by the borsh encoder, so it must not be rearranged.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Optional, Tuple, Union

import base58


class KeyType(IntEnum):
    """NEAR signature algorithms and their borsh discriminants."""
    ED25519 = 0
    SECP256K1 = 1

    @property
    def prefix(self) -> str:
        return self.name.lower()

    @property
    def key_length(self) -> int:
        return 32 if self is KeyType.ED25519 else 64


@dataclass(frozen=True)
class NearPublicKey:
    """
    A NEAR public key.

    Attributes:
        key_type: Signature algorithm of the key
        data: Raw key bytes (32 for ed25519, 64 for secp256k1)
    """
    key_type: KeyType
    data: bytes

    def __post_init__(self):
        if len(self.data) != self.key_type.key_length:
            raise ValueError(
                f"{self.key_type.prefix} key must be {self.key_type.key_length} bytes, "
                f"got {len(self.data)}"
            )

    def __str__(self) -> str:
        return f"{self.key_type.prefix}:{base58.b58encode(self.data).decode('ascii')}"


@dataclass(frozen=True)
class FullAccessPermission:
    discriminant: ClassVar[int] = 1


@dataclass(frozen=True)
class FunctionCallPermission:
    """Access key permission restricted to calls on one contract."""
    discriminant: ClassVar[int] = 0

    allowance: Optional[int]
    receiver_id: str
    method_names: Tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.method_names, tuple):
            object.__setattr__(self, "method_names", tuple(self.method_names))


AccessKeyPermission = Union[FunctionCallPermission, FullAccessPermission]


@dataclass(frozen=True)
class AccessKey:
    nonce: int
    permission: AccessKeyPermission


@dataclass(frozen=True)
class CreateAccount:
    discriminant: ClassVar[int] = 0


@dataclass(frozen=True)
class DeployContract:
    discriminant: ClassVar[int] = 1

    code: bytes


@dataclass(frozen=True)
class FunctionCall:
    """
    Call a method on the receiver contract.

    ``args`` may be given as text, in which case it is UTF-8 encoded.
    """
    discriminant: ClassVar[int] = 2

    method_name: str
    args: bytes = b""
    gas: int = 30_000_000_000_000
    deposit: int = 0

    def __post_init__(self):
        if isinstance(self.args, str):
            object.__setattr__(self, "args", self.args.encode("utf-8"))


@dataclass(frozen=True)
class Transfer:
    discriminant: ClassVar[int] = 3

    deposit: int


@dataclass(frozen=True)
class Stake:
    discriminant: ClassVar[int] = 4

    stake: int
    public_key: NearPublicKey


@dataclass(frozen=True)
class AddKey:
    discriminant: ClassVar[int] = 5

    public_key: NearPublicKey
    access_key: AccessKey


@dataclass(frozen=True)
class DeleteKey:
    discriminant: ClassVar[int] = 6

    public_key: NearPublicKey


@dataclass(frozen=True)
class DeleteAccount:
    discriminant: ClassVar[int] = 7

    beneficiary_id: str


# Delegate actions may carry any action except another delegate action.
NonDelegateAction = Union[
    CreateAccount, DeployContract, FunctionCall, Transfer,
    Stake, AddKey, DeleteKey, DeleteAccount,
]


@dataclass(frozen=True)
class DelegateAction:
    """
    A NEAR meta-transaction descriptor (NEP-366).

    Attributes:
        sender_id: Account the actions are performed on behalf of
        receiver_id: Account the actions are sent to
        actions: Ordered sub-actions
        nonce: Access key nonce
        max_block_height: Block height after which the action expires
        public_key: Key of the sender that will sign the action
    """
    sender_id: str
    receiver_id: str
    actions: Tuple[NonDelegateAction, ...]
    nonce: int
    max_block_height: int
    public_key: NearPublicKey

    def __post_init__(self):
        if not isinstance(self.actions, tuple):
            object.__setattr__(self, "actions", tuple(self.actions))
