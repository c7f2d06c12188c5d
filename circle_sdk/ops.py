"""
Write operations against Circle developer-controlled wallets.

Every call takes a request builder and turns it into a wire body with
``builder.build(encryptor)``, so each request carries a ciphertext and an
idempotency key that were generated for it alone.
"""
import logging
from typing import Optional

import requests

from .builders import (
    AccelerateTransactionRequestBuilder, CancelTransactionRequestBuilder,
    ContractExecutionTransactionRequestBuilder, CreateWalletRequestBuilder, SignDelegateRequestBuilder, SignMessageRequestBuilder,
    SignTransactionRequestBuilder, SignTypedDataRequestBuilder,
    TransferTransactionRequestBuilder, WalletUpgradeTransactionRequestBuilder,
)
from .config import CircleSettings
from .crypto import EntitySecretEncryptor
from .models import (
    SignatureResponse, SignDelegateResponse, SignTransactionResponse,
    TransactionStateResponse, UpdateWalletRequest, WalletResponse, WalletsResponse,
)
from .transport import HttpClient, path_segment

DEVELOPER_PREFIX = "/v1/w3s/developer"


class CircleOps:
    """
    Client for Circle endpoints that need the entity secret.

    Attributes:
        http: Transport used for every request
        encryptor: Produces a fresh entity secret ciphertext per request
    """

    def __init__(
        self,
        http: HttpClient,
        encryptor: EntitySecretEncryptor,
        logger: Optional[logging.Logger] = None
    ):
        self.http = http
        self.encryptor = encryptor
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: CircleSettings,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ) -> "CircleOps":
        """
        Build a write client from settings.

        Raises:
            ConfigError: If the entity secret or public key is missing
            KeyParseError: If the public key PEM cannot be parsed
        """
        secret, public_key = settings.require_entity_credentials()
        http = HttpClient(
            settings.base_url,
            api_key=settings.api_key,
            session=session,
            timeout=settings.timeout,
            logger=logger,
        )
        return cls(http, EntitySecretEncryptor(secret, public_key), logger=logger)

    def __enter__(self) -> "CircleOps":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.http.close()

    # ------------------------------------------------------------------
    # Wallets
    # ------------------------------------------------------------------

    def create_wallet(self, builder: CreateWalletRequestBuilder) -> WalletsResponse:
        """
        Create one or more wallets in a wallet set.

        Args:
            builder: Wallet creation parameters

        Returns:
            The created wallets
        """
        request = builder.build(self.encryptor)
        self.logger.info(
            f"Creating {request.count or 1} wallet(s) in wallet set {request.wallet_set_id}"
        )
        return self.http.execute(
            "POST", f"{DEVELOPER_PREFIX}/wallets", request, model=WalletsResponse
        )

    def update_wallet(
        self,
        wallet_id: str,
        name: Optional[str] = None,
        ref_id: Optional[str] = None
    ) -> WalletResponse:
        """Update the name or reference ID of a wallet."""
        request = UpdateWalletRequest(name=name, ref_id=ref_id)
        return self.http.execute(
            "PUT", f"/v1/w3s/wallets/{path_segment(wallet_id)}", request, model=WalletResponse
        )

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def sign_message(self, builder: SignMessageRequestBuilder) -> SignatureResponse:
        request = builder.build(self.encryptor)
        return self.http.execute(
            "POST", f"{DEVELOPER_PREFIX}/sign/message", request, model=SignatureResponse
        )

    def sign_typed_data(self, builder: SignTypedDataRequestBuilder) -> SignatureResponse:
        request = builder.build(self.encryptor)
        return self.http.execute(
            "POST", f"{DEVELOPER_PREFIX}/sign/typedData", request, model=SignatureResponse
        )

    def sign_transaction(self, builder: SignTransactionRequestBuilder) -> SignTransactionResponse:
        """
        Sign a raw or JSON-described transaction without broadcasting it.

        Raises:
            ValueError: If the builder has neither a raw nor a JSON transaction
        """
        request = builder.build(self.encryptor)
        return self.http.execute(
            "POST", f"{DEVELOPER_PREFIX}/sign/transaction", request,
            model=SignTransactionResponse,
        )

    def sign_delegate(self, builder: SignDelegateRequestBuilder) -> SignDelegateResponse:
        """
        Sign a NEAR delegate action (meta transaction).

        Args:
            builder: Wallet ID plus the encoded delegate action

        Returns:
            Signature and signed delegate action
        """
        request = builder.build(self.encryptor)
        self.logger.debug(f"Signing NEAR delegate action with wallet {request.wallet_id}")
        return self.http.execute(
            "POST", f"{DEVELOPER_PREFIX}/sign/delegateAction", request,
            model=SignDelegateResponse,
        )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def create_transfer_transaction(
        self, builder: TransferTransactionRequestBuilder
    ) -> TransactionStateResponse:
        """
        Create a token transfer.

        Reusing the same builder for a retry yields a new idempotency key
        unless one was pinned with ``with_idempotency_key``.

        Raises:
            ValueError: If no source wallet is identified
        """
        request = builder.build(self.encryptor)
        self.logger.info(
            f"Creating transfer to {request.destination_address} "
            f"(idempotency key {request.idempotency_key})"
        )
        return self.http.execute(
            "POST", f"{DEVELOPER_PREFIX}/transactions/transfer", request,
            model=TransactionStateResponse,
        )

    def cancel_transaction(
        self, builder: CancelTransactionRequestBuilder
    ) -> TransactionStateResponse:
        request = builder.build(self.encryptor)
        path = f"{DEVELOPER_PREFIX}/transactions/{path_segment(builder.transaction_id)}/cancel"
        return self.http.execute("POST", path, request, model=TransactionStateResponse)

    def accelerate_transaction(
        self, builder: AccelerateTransactionRequestBuilder
    ) -> TransactionStateResponse:
        request = builder.build(self.encryptor)
        path = f"{DEVELOPER_PREFIX}/transactions/{path_segment(builder.transaction_id)}/accelerate"
        return self.http.execute("POST", path, request, model=TransactionStateResponse)

    def create_contract_execution_transaction(
        self, builder: ContractExecutionTransactionRequestBuilder
    ) -> TransactionStateResponse:
        """
        Call a smart contract function from a developer wallet.

        Raises:
            ValueError: If the call is described by both ABI fields and call
                data, or by neither
        """
        request = builder.build(self.encryptor)
        self.logger.info(
            f"Executing contract {request.contract_address} from wallet {request.wallet_id} "
            f"(idempotency key {request.idempotency_key})"
        )
        return self.http.execute(
            "POST", f"{DEVELOPER_PREFIX}/transactions/contractExecution", request,
            model=TransactionStateResponse,
        )

    def create_wallet_upgrade_transaction(
        self, builder: WalletUpgradeTransactionRequestBuilder
    ) -> TransactionStateResponse:
        request = builder.build(self.encryptor)
        self.logger.info(
            f"Upgrading wallet {request.wallet_id} to {request.new_sca_core.value}"
        )
        return self.http.execute(
            "POST", f"{DEVELOPER_PREFIX}/transactions/walletUpgrade", request,
            model=TransactionStateResponse,
        )
