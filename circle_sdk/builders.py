"""
Request builders for write operations.

Builders are immutable: every ``with_*`` call returns a new builder and
leaves the original untouched, so a builder can be kept as a template and
reused. ``build()`` is the only place where the entity secret ciphertext and
the idempotency key are produced, and it produces new ones on every call.
Re-running ``build()`` is therefore the correct way to retry a request;
replaying a previously built body is not.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .crypto import EntitySecretEncryptor
from .idempotency import generate_idempotency_key, validate_idempotency_key
from .models import (
    AccelerateTransactionRequest, AccountType, Blockchain, CancelTransactionRequest,
    CreateContractExecutionTransactionRequest, CreateTransferTransactionRequest,
    CreateWalletRequest, CreateWalletUpgradeTransactionRequest, FeeLevel, ScaCore,
    SignDelegateRequest, SignMessageRequest, SignTransactionRequest, SignTypedDataRequest,
    WalletMetadata,
)
from .near import DelegateAction, encode_delegate_action


class RequestBuilder(BaseModel):
    """Base class for immutable request builders"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    def with_options(self, **fields: Any):
        """
        Return a copy of the builder with the given fields replaced.

        Raises:
            TypeError: If a field name is unknown
            ValueError: If a value has the wrong type
            IdentifierError: If an idempotency key is not a UUID
        """
        unknown = set(fields) - set(type(self).model_fields)
        if unknown:
            raise TypeError(f"{type(self).__name__} has no option(s): {', '.join(sorted(unknown))}")
        try:
            return type(self)(**{**dict(self), **fields})
        except ValidationError as e:
            raise ValueError(str(e)) from e


class IdempotentRequestBuilder(RequestBuilder):
    """Builder for requests that carry an idempotency key"""
    idempotency_key: Optional[str] = None

    def __init__(self, **data: Any):
        # Checked before pydantic sees it so a bad key keeps its own error type
        if data.get("idempotency_key") is not None:
            data["idempotency_key"] = validate_idempotency_key(data["idempotency_key"])
        super().__init__(**data)

    @field_validator("idempotency_key")
    @classmethod
    def _check_idempotency_key(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else validate_idempotency_key(value)

    def with_idempotency_key(self, key: str):
        """
        Pin the idempotency key so that rebuilt requests deduplicate server-side.

        Raises:
            IdentifierError: If the key is not a UUID
        """
        return self.model_copy(update={"idempotency_key": validate_idempotency_key(key)})

    def _next_idempotency_key(self) -> str:
        if self.idempotency_key is not None:
            return self.idempotency_key
        return generate_idempotency_key()


class CreateWalletRequestBuilder(IdempotentRequestBuilder):
    wallet_set_id: str
    blockchains: List[Blockchain]
    account_type: Optional[AccountType] = None
    count: Optional[int] = None
    metadata: Optional[List[WalletMetadata]] = None
    name: Optional[str] = None
    ref_id: Optional[str] = None

    def build(self, encryptor: EntitySecretEncryptor) -> CreateWalletRequest:
        return CreateWalletRequest(
            idempotency_key=self._next_idempotency_key(),
            entity_secret_ciphertext=encryptor.ciphertext(),
            wallet_set_id=self.wallet_set_id,
            blockchains=self.blockchains,
            account_type=self.account_type,
            count=self.count,
            metadata=self.metadata,
            name=self.name,
            ref_id=self.ref_id,
        )


class SignMessageRequestBuilder(RequestBuilder):
    wallet_id: str
    message: str
    encoded_by_hex: Optional[bool] = None
    memo: Optional[str] = None

    def build(self, encryptor: EntitySecretEncryptor) -> SignMessageRequest:
        return SignMessageRequest(
            entity_secret_ciphertext=encryptor.ciphertext(),
            wallet_id=self.wallet_id,
            message=self.message,
            encoded_by_hex=self.encoded_by_hex,
            memo=self.memo,
        )


class SignTypedDataRequestBuilder(RequestBuilder):
    wallet_id: str
    data: str
    memo: Optional[str] = None

    def build(self, encryptor: EntitySecretEncryptor) -> SignTypedDataRequest:
        return SignTypedDataRequest(
            entity_secret_ciphertext=encryptor.ciphertext(),
            wallet_id=self.wallet_id,
            data=self.data,
            memo=self.memo,
        )


class SignTransactionRequestBuilder(RequestBuilder):
    wallet_id: str
    raw_transaction: Optional[str] = None
    transaction: Optional[str] = None
    memo: Optional[str] = None

    def build(self, encryptor: EntitySecretEncryptor) -> SignTransactionRequest:
        if not self.raw_transaction and not self.transaction:
            raise ValueError("Either raw_transaction or transaction must be provided")
        return SignTransactionRequest(
            entity_secret_ciphertext=encryptor.ciphertext(),
            wallet_id=self.wallet_id,
            raw_transaction=self.raw_transaction,
            transaction=self.transaction,
            memo=self.memo,
        )


class SignDelegateRequestBuilder(RequestBuilder):
    """
    Builder for NEAR delegate action signing.

    ``unsigned_delegate_action`` accepts a :class:`DelegateAction`, which is
    encoded on the spot, or the base64 output of
    :func:`circle_sdk.near.encode_delegate_action`.
    """
    wallet_id: str
    unsigned_delegate_action: str

    @field_validator("unsigned_delegate_action", mode="before")
    @classmethod
    def _encode_action(cls, value: Any) -> Any:
        if isinstance(value, DelegateAction):
            return encode_delegate_action(value)
        return value

    @classmethod
    def from_delegate_action(cls, wallet_id: str, action: DelegateAction) -> "SignDelegateRequestBuilder":
        """Encode a delegate action and wrap it in a builder."""
        return cls(wallet_id=wallet_id, unsigned_delegate_action=encode_delegate_action(action))

    def build(self, encryptor: EntitySecretEncryptor) -> SignDelegateRequest:
        return SignDelegateRequest(
            entity_secret_ciphertext=encryptor.ciphertext(),
            wallet_id=self.wallet_id,
            unsigned_delegate_action=self.unsigned_delegate_action,
        )


class TransactionRequestBuilder(IdempotentRequestBuilder):
    """
    Builder for requests that create an on-chain transaction.

    Either ``fee_level`` or explicit gas values may be set; Circle rejects
    requests that mix them.
    """
    fee_level: Optional[FeeLevel] = None
    gas_limit: Optional[str] = None
    gas_price: Optional[str] = None
    max_fee: Optional[str] = None
    priority_fee: Optional[str] = None
    ref_id: Optional[str] = None

    def _fee_options(self) -> Dict[str, Any]:
        return {
            "fee_level": self.fee_level,
            "gas_limit": self.gas_limit,
            "gas_price": self.gas_price,
            "max_fee": self.max_fee,
            "priority_fee": self.priority_fee,
            "ref_id": self.ref_id,
        }


class TransferTransactionRequestBuilder(TransactionRequestBuilder):
    destination_address: str
    amounts: Optional[List[str]] = None
    wallet_id: Optional[str] = None
    wallet_address: Optional[str] = None
    blockchain: Optional[Blockchain] = None
    token_id: Optional[str] = None
    token_address: Optional[str] = None
    nft_token_ids: Optional[List[str]] = None

    def build(self, encryptor: EntitySecretEncryptor) -> CreateTransferTransactionRequest:
        if not self.wallet_id and not (self.wallet_address and self.blockchain):
            raise ValueError("Either wallet_id or wallet_address with blockchain must be provided")
        return CreateTransferTransactionRequest(
            idempotency_key=self._next_idempotency_key(),
            entity_secret_ciphertext=encryptor.ciphertext(),
            destination_address=self.destination_address,
            amounts=self.amounts,
            wallet_id=self.wallet_id,
            wallet_address=self.wallet_address,
            blockchain=self.blockchain,
            token_id=self.token_id,
            token_address=self.token_address,
            nft_token_ids=self.nft_token_ids,
            **self._fee_options(),
        )


class ContractExecutionTransactionRequestBuilder(TransactionRequestBuilder):
    """
    Builder for a smart contract call from a developer wallet.

    The call is described either by ``abi_function_signature`` (with
    optional ``abi_parameters``) or by raw ``call_data``, never both.
    """
    wallet_id: str
    contract_address: str
    abi_function_signature: Optional[str] = None
    abi_parameters: Optional[List[Any]] = None
    call_data: Optional[str] = None
    amount: Optional[str] = None

    def build(self, encryptor: EntitySecretEncryptor) -> CreateContractExecutionTransactionRequest:
        if self.call_data and (self.abi_function_signature or self.abi_parameters):
            raise ValueError("call_data cannot be combined with abi_function_signature or abi_parameters")
        if not self.call_data and not self.abi_function_signature:
            raise ValueError("Either abi_function_signature or call_data must be provided")
        return CreateContractExecutionTransactionRequest(
            idempotency_key=self._next_idempotency_key(),
            entity_secret_ciphertext=encryptor.ciphertext(),
            wallet_id=self.wallet_id,
            contract_address=self.contract_address,
            abi_function_signature=self.abi_function_signature,
            abi_parameters=self.abi_parameters,
            call_data=self.call_data,
            amount=self.amount,
            **self._fee_options(),
        )


class WalletUpgradeTransactionRequestBuilder(TransactionRequestBuilder):
    """Builder for upgrading an SCA wallet to a newer core version."""
    wallet_id: str
    new_sca_core: ScaCore

    def build(self, encryptor: EntitySecretEncryptor) -> CreateWalletUpgradeTransactionRequest:
        return CreateWalletUpgradeTransactionRequest(
            idempotency_key=self._next_idempotency_key(),
            entity_secret_ciphertext=encryptor.ciphertext(),
            wallet_id=self.wallet_id,
            new_sca_core=self.new_sca_core,
            **self._fee_options(),
        )


class CancelTransactionRequestBuilder(IdempotentRequestBuilder):
    transaction_id: str

    def build(self, encryptor: EntitySecretEncryptor) -> CancelTransactionRequest:
        return CancelTransactionRequest(
            idempotency_key=self._next_idempotency_key(),
            entity_secret_ciphertext=encryptor.ciphertext(),
        )


class AccelerateTransactionRequestBuilder(IdempotentRequestBuilder):
    transaction_id: str

    def build(self, encryptor: EntitySecretEncryptor) -> AccelerateTransactionRequest:
        return AccelerateTransactionRequest(
            idempotency_key=self._next_idempotency_key(),
            entity_secret_ciphertext=encryptor.ciphertext(),
        )
