"""
Circle SDK - Python client core for Circle Web3 Services developer-controlled wallets.
"""
from .builders import (
    AccelerateTransactionRequestBuilder,
    CancelTransactionRequestBuilder,
    ContractExecutionTransactionRequestBuilder,
    CreateWalletRequestBuilder,
    SignDelegateRequestBuilder,
    SignMessageRequestBuilder,
    SignTransactionRequestBuilder,
    SignTypedDataRequestBuilder,
    TransferTransactionRequestBuilder,
    WalletUpgradeTransactionRequestBuilder,
)
from .config import CircleSettings
from .crypto import EntitySecretEncryptor, encrypt_entity_secret, parse_public_key
from .exceptions import (
    ApiError,
    CircleError,
    ConfigError,
    DecodeError,
    DecodeResponseError,
    EncryptionError,
    IdentifierError,
    KeyParseError,
    TransportError,
)
from .idempotency import generate_idempotency_key, validate_idempotency_key
from .models import AccountType, Blockchain, FeeLevel, ScaCore
from .ops import CircleOps
from .transport import HttpClient, build_query_params, path_segment
from .version import __version__
from .view import CircleView

__all__ = [
    "AccelerateTransactionRequestBuilder",
    "AccountType",
    "ApiError",
    "Blockchain",
    "CancelTransactionRequestBuilder",
    "CircleError",
    "CircleOps",
    "CircleSettings",
    "CircleView",
    "ConfigError",
    "ContractExecutionTransactionRequestBuilder",
    "CreateWalletRequestBuilder",
    "DecodeError",
    "DecodeResponseError",
    "EncryptionError",
    "EntitySecretEncryptor",
    "FeeLevel",
    "HttpClient",
    "IdentifierError",
    "KeyParseError",
    "ScaCore",
    "SignDelegateRequestBuilder",
    "SignMessageRequestBuilder",
    "SignTransactionRequestBuilder",
    "SignTypedDataRequestBuilder",
    "TransferTransactionRequestBuilder",
    "TransportError",
    "WalletUpgradeTransactionRequestBuilder",
    "build_query_params",
    "encrypt_entity_secret",
    "generate_idempotency_key",
    "parse_public_key",
    "path_segment",
    "validate_idempotency_key",
    "__version__",
]
