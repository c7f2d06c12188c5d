"""
Data models for the Circle SDK.

Field names are snake_case in Python and camelCase on the wire.
"""
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar('T')


class CircleModel(BaseModel):
    """Base model for Circle API payloads"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> Dict[str, Any]:
        """Dump to the JSON-ready camelCase dict sent to the API, dropping unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Blockchain(str, Enum):
    """Blockchains supported by Circle Web3 Services"""
    ETH = "ETH"
    ETH_SEPOLIA = "ETH-SEPOLIA"
    AVAX = "AVAX"
    AVAX_FUJI = "AVAX-FUJI"
    MATIC = "MATIC"
    MATIC_AMOY = "MATIC-AMOY"
    SOL = "SOL"
    SOL_DEVNET = "SOL-DEVNET"
    ARB = "ARB"
    ARB_SEPOLIA = "ARB-SEPOLIA"
    NEAR = "NEAR"
    NEAR_TESTNET = "NEAR-TESTNET"
    EVM = "EVM"
    EVM_TESTNET = "EVM-TESTNET"
    UNI = "UNI"
    UNI_SEPOLIA = "UNI-SEPOLIA"
    BASE = "BASE"
    BASE_SEPOLIA = "BASE-SEPOLIA"
    OP = "OP"
    OP_SEPOLIA = "OP-SEPOLIA"
    APTOS = "APTOS"
    APTOS_TESTNET = "APTOS-TESTNET"
    ARC_TESTNET = "ARC-TESTNET"


class AccountType(str, Enum):
    SCA = "SCA"
    EOA = "EOA"


class FeeLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ScaCore(str, Enum):
    """Smart contract account core versions"""
    CIRCLE_4337_V1 = "circle_4337_v1"
    CIRCLE_6900_SINGLEOWNER_V1 = "circle_6900_singleowner_v1"
    CIRCLE_6900_SINGLEOWNER_V2 = "circle_6900_singleowner_v2"
    CIRCLE_6900_SINGLEOWNER_V3 = "circle_6900_singleowner_v3"


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------

class ResponseEnvelope(BaseModel, Generic[T]):
    """Successful response wrapper: ``{"data": ...}``"""
    data: T


class ErrorResponse(BaseModel):
    """Error response body: ``{"code": ..., "message": ...}``"""
    code: Optional[int] = None
    message: str


class PaginationParams(CircleModel):
    """Cursor pagination parameters shared by list endpoints"""
    page_after: Optional[str] = None
    page_before: Optional[str] = None
    page_size: Optional[int] = None


# ---------------------------------------------------------------------------
# Query parameters
# ---------------------------------------------------------------------------

class ListWalletsParams(PaginationParams):
    address: Optional[str] = None
    blockchain: Optional[Blockchain] = None
    wallet_set_id: Optional[str] = None
    ref_id: Optional[str] = None
    from_date: Optional[str] = Field(None, alias="from")
    to_date: Optional[str] = Field(None, alias="to")


class TokenBalancesParams(PaginationParams):
    include_all: Optional[bool] = None
    name: Optional[str] = None
    token_address: Optional[str] = None
    standard: Optional[str] = None


class ListWalletsWithBalancesParams(PaginationParams):
    """Filters for wallets-with-balances; ``blockchain`` is mandatory"""
    blockchain: Blockchain
    address: Optional[str] = None
    sca_core: Optional[ScaCore] = None
    wallet_set_id: Optional[str] = None
    ref_id: Optional[str] = None
    amount_gte: Optional[str] = Field(None, alias="amount__gte")
    token_address: Optional[str] = None
    from_date: Optional[str] = Field(None, alias="from")
    to_date: Optional[str] = Field(None, alias="to")


class ListTransactionsParams(PaginationParams):
    blockchain: Optional[Blockchain] = None
    destination_address: Optional[str] = None
    include_all: Optional[bool] = None
    operation: Optional[str] = None
    state: Optional[str] = None
    tx_hash: Optional[str] = None
    tx_type: Optional[str] = None
    wallet_ids: Optional[str] = None
    from_date: Optional[str] = Field(None, alias="from")
    to_date: Optional[str] = Field(None, alias="to")


# ---------------------------------------------------------------------------
# Response payloads
# ---------------------------------------------------------------------------

class PingResponse(CircleModel):
    message: str


class Wallet(CircleModel):
    id: str
    address: Optional[str] = None
    blockchain: Optional[str] = None
    state: Optional[str] = None
    wallet_set_id: Optional[str] = None
    custody_type: Optional[str] = None
    account_type: Optional[str] = None
    name: Optional[str] = None
    ref_id: Optional[str] = None
    user_id: Optional[str] = None
    initial_public_key: Optional[str] = None
    create_date: Optional[str] = None
    update_date: Optional[str] = None


class WalletsResponse(CircleModel):
    wallets: List[Wallet] = Field(default_factory=list)


class WalletResponse(CircleModel):
    wallet: Wallet


class TokenBalance(CircleModel):
    amount: str
    token: Dict[str, Any] = Field(default_factory=dict)
    update_date: Optional[str] = None


class TokenBalancesResponse(CircleModel):
    token_balances: List[TokenBalance] = Field(default_factory=list)


class WalletWithBalances(Wallet):
    token_balances: List[TokenBalance] = Field(default_factory=list)


class WalletsWithBalancesResponse(CircleModel):
    wallets: List[WalletWithBalances] = Field(default_factory=list)


class Nft(CircleModel):
    amount: str
    metadata: Optional[str] = None
    nft_token_id: Optional[str] = None
    token: Dict[str, Any] = Field(default_factory=dict)
    update_date: Optional[str] = None


class NftsResponse(CircleModel):
    nfts: List[Nft] = Field(default_factory=list)


class Transaction(CircleModel):
    id: str
    state: Optional[str] = None
    blockchain: Optional[str] = None
    transaction_type: Optional[str] = None
    operation: Optional[str] = None
    tx_hash: Optional[str] = None
    wallet_id: Optional[str] = None
    source_address: Optional[str] = None
    destination_address: Optional[str] = None
    amounts: Optional[List[str]] = None
    ref_id: Optional[str] = None
    create_date: Optional[str] = None
    update_date: Optional[str] = None


class TransactionsResponse(CircleModel):
    transactions: List[Transaction] = Field(default_factory=list)


class TransactionResponse(CircleModel):
    transaction: Transaction


class TransactionStateResponse(CircleModel):
    """Returned by endpoints that create, cancel or accelerate a transaction"""
    id: str
    state: Optional[str] = None


class SignatureResponse(CircleModel):
    signature: str


class SignTransactionResponse(CircleModel):
    signature: str
    signed_transaction: Optional[str] = None
    tx_hash: Optional[str] = None


class SignDelegateResponse(CircleModel):
    signature: str
    signed_delegate_action: Optional[str] = None


class ValidateAddressResponse(CircleModel):
    is_valid: bool


class FeeEstimate(CircleModel):
    """Gas settings for one fee level; EIP-1559 chains fill the fee fields"""
    gas_limit: Optional[str] = None
    gas_price: Optional[str] = None
    max_fee: Optional[str] = None
    priority_fee: Optional[str] = None
    base_fee: Optional[str] = None
    network_fee: Optional[str] = None


class EstimateFeeResponse(CircleModel):
    low: Optional[FeeEstimate] = None
    medium: Optional[FeeEstimate] = None
    high: Optional[FeeEstimate] = None
    call_gas_limit: Optional[str] = None
    verification_gas_limit: Optional[str] = None
    pre_verification_gas: Optional[str] = None


class QueryContractResponse(CircleModel):
    output_values: Optional[List[Any]] = None
    output_data: Optional[str] = None


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class WalletMetadata(CircleModel):
    name: Optional[str] = None
    ref_id: Optional[str] = None


class CreateWalletRequest(CircleModel):
    idempotency_key: str
    entity_secret_ciphertext: str
    wallet_set_id: str
    blockchains: List[Blockchain]
    account_type: Optional[AccountType] = None
    count: Optional[int] = None
    metadata: Optional[List[WalletMetadata]] = None
    name: Optional[str] = None
    ref_id: Optional[str] = None


class UpdateWalletRequest(CircleModel):
    name: Optional[str] = None
    ref_id: Optional[str] = None


class SignMessageRequest(CircleModel):
    entity_secret_ciphertext: str
    wallet_id: str
    message: str
    encoded_by_hex: Optional[bool] = None
    memo: Optional[str] = None


class SignTypedDataRequest(CircleModel):
    entity_secret_ciphertext: str
    wallet_id: str
    data: str
    memo: Optional[str] = None


class SignTransactionRequest(CircleModel):
    entity_secret_ciphertext: str
    wallet_id: str
    raw_transaction: Optional[str] = None
    transaction: Optional[str] = None
    memo: Optional[str] = None


class SignDelegateRequest(CircleModel):
    entity_secret_ciphertext: str
    wallet_id: str
    unsigned_delegate_action: str


class CreateTransferTransactionRequest(CircleModel):
    idempotency_key: str
    entity_secret_ciphertext: str
    destination_address: str
    amounts: Optional[List[str]] = None
    wallet_id: Optional[str] = None
    wallet_address: Optional[str] = None
    blockchain: Optional[Blockchain] = None
    token_id: Optional[str] = None
    token_address: Optional[str] = None
    nft_token_ids: Optional[List[str]] = None
    fee_level: Optional[FeeLevel] = None
    gas_limit: Optional[str] = None
    gas_price: Optional[str] = None
    max_fee: Optional[str] = None
    priority_fee: Optional[str] = None
    ref_id: Optional[str] = None


class CancelTransactionRequest(CircleModel):
    idempotency_key: str
    entity_secret_ciphertext: str


class AccelerateTransactionRequest(CircleModel):
    idempotency_key: str
    entity_secret_ciphertext: str


class ValidateAddressRequest(CircleModel):
    address: str
    blockchain: Blockchain


class RequestTestnetTokensRequest(CircleModel):
    address: str
    blockchain: Blockchain
    native: Optional[bool] = None
    usdc: Optional[bool] = None
    eurc: Optional[bool] = None


class CreateContractExecutionTransactionRequest(CircleModel):
    idempotency_key: str
    entity_secret_ciphertext: str
    wallet_id: str
    contract_address: str
    abi_function_signature: Optional[str] = None
    abi_parameters: Optional[List[Any]] = None
    call_data: Optional[str] = None
    amount: Optional[str] = None
    fee_level: Optional[FeeLevel] = None
    gas_limit: Optional[str] = None
    gas_price: Optional[str] = None
    max_fee: Optional[str] = None
    priority_fee: Optional[str] = None
    ref_id: Optional[str] = None


class CreateWalletUpgradeTransactionRequest(CircleModel):
    idempotency_key: str
    entity_secret_ciphertext: str
    wallet_id: str
    new_sca_core: ScaCore
    fee_level: Optional[FeeLevel] = None
    gas_limit: Optional[str] = None
    gas_price: Optional[str] = None
    max_fee: Optional[str] = None
    priority_fee: Optional[str] = None
    ref_id: Optional[str] = None


class EstimateTransferFeeRequest(CircleModel):
    """Fee estimate for a transfer; identify the source by wallet or by address and chain"""
    destination_address: str
    amounts: List[str]
    nft_token_ids: Optional[List[str]] = None
    source_address: Optional[str] = None
    token_id: Optional[str] = None
    token_address: Optional[str] = None
    blockchain: Optional[Blockchain] = None
    wallet_id: Optional[str] = None


class EstimateContractExecutionFeeRequest(CircleModel):
    contract_address: str
    abi_function_signature: Optional[str] = None
    abi_parameters: Optional[List[Any]] = None
    call_data: Optional[str] = None
    amount: Optional[str] = None
    blockchain: Optional[Blockchain] = None
    source_address: Optional[str] = None
    wallet_id: Optional[str] = None


class QueryContractRequest(CircleModel):
    """Read-only contract call; no transaction is created"""
    blockchain: Blockchain
    address: str
    abi_function_signature: Optional[str] = None
    abi_parameters: Optional[List[Any]] = None
    abi_json: Optional[str] = None
    call_data: Optional[str] = None
    from_address: Optional[str] = None
