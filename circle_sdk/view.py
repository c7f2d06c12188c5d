"""
Read-only Circle endpoints.

None of these need the entity secret, so a CircleView runs with only an API
key. The key is required even though the health check itself ignores it.
"""
import logging
from typing import Any, List, Optional

import requests

from .config import CircleSettings
from .models import (
    Blockchain, EstimateContractExecutionFeeRequest, EstimateFeeResponse,
    EstimateTransferFeeRequest, ListTransactionsParams, ListWalletsParams,
    ListWalletsWithBalancesParams, NftsResponse, PingResponse, QueryContractRequest,
    QueryContractResponse, RequestTestnetTokensRequest, TokenBalancesParams,
    TokenBalancesResponse, TransactionResponse, TransactionsResponse,
    ValidateAddressRequest, ValidateAddressResponse, WalletResponse, WalletsResponse,
    WalletsWithBalancesResponse,
)
from .transport import HttpClient, path_segment


class CircleView:
    """Client for Circle query endpoints."""

    def __init__(self, http: HttpClient, logger: Optional[logging.Logger] = None):
        self.http = http
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: CircleSettings,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ) -> "CircleView":
        http = HttpClient(
            settings.base_url,
            api_key=settings.api_key,
            session=session,
            timeout=settings.timeout,
            logger=logger,
        )
        return cls(http, logger=logger)

    def __enter__(self) -> "CircleView":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.http.close()

    def ping(self) -> PingResponse:
        """Check that the API is reachable. The reply is not enveloped."""
        return self.http.execute_plain("GET", "/ping", model=PingResponse)

    def list_wallets(self, params: Optional[ListWalletsParams] = None) -> WalletsResponse:
        return self.http.execute_with_query(
            "/v1/w3s/wallets", params or ListWalletsParams(), model=WalletsResponse
        )

    def get_wallet(self, wallet_id: str) -> WalletResponse:
        path = f"/v1/w3s/wallets/{path_segment(wallet_id)}"
        return self.http.execute("GET", path, model=WalletResponse)

    def get_token_balances(
        self,
        wallet_id: str,
        params: Optional[TokenBalancesParams] = None
    ) -> TokenBalancesResponse:
        path = f"/v1/w3s/wallets/{path_segment(wallet_id)}/balances"
        return self.http.execute_with_query(
            path, params or TokenBalancesParams(), model=TokenBalancesResponse
        )

    def get_nfts(
        self,
        wallet_id: str,
        params: Optional[TokenBalancesParams] = None
    ) -> NftsResponse:
        """NFTs held by a wallet. Accepts the same filters as token balances."""
        path = f"/v1/w3s/wallets/{path_segment(wallet_id)}/nfts"
        return self.http.execute_with_query(
            path, params or TokenBalancesParams(), model=NftsResponse
        )

    def list_wallets_with_token_balances(
        self, params: ListWalletsWithBalancesParams
    ) -> WalletsWithBalancesResponse:
        """
        List wallets on one blockchain together with their token balances.

        Args:
            params: Filters; ``blockchain`` must be set

        Returns:
            Wallets, each with a ``token_balances`` list
        """
        return self.http.execute_with_query(
            "/v1/w3s/wallets/balances", params, model=WalletsWithBalancesResponse
        )

    def list_transactions(
        self, params: Optional[ListTransactionsParams] = None
    ) -> TransactionsResponse:
        return self.http.execute_with_query(
            "/v1/w3s/transactions", params or ListTransactionsParams(),
            model=TransactionsResponse,
        )

    def get_transaction(self, transaction_id: str) -> TransactionResponse:
        path = f"/v1/w3s/transactions/{path_segment(transaction_id)}"
        return self.http.execute("GET", path, model=TransactionResponse)

    def validate_address(self, address: str, blockchain: Blockchain) -> ValidateAddressResponse:
        request = ValidateAddressRequest(address=address, blockchain=blockchain)
        return self.http.execute(
            "POST", "/v1/w3s/transactions/validateAddress", request,
            model=ValidateAddressResponse,
        )

    def estimate_transfer_fee(self, request: EstimateTransferFeeRequest) -> EstimateFeeResponse:
        """
        Estimate low, medium and high fees for a transfer.

        Raises:
            ValueError: If neither a wallet ID nor a source address with
                blockchain identifies the sender
        """
        if not request.wallet_id and not (request.source_address and request.blockchain):
            raise ValueError("Either wallet_id or source_address with blockchain must be provided")
        return self.http.execute(
            "POST", "/v1/w3s/transactions/transfer/estimateFee", request,
            model=EstimateFeeResponse,
        )

    def estimate_contract_execution_fee(
        self, request: EstimateContractExecutionFeeRequest
    ) -> EstimateFeeResponse:
        return self.http.execute(
            "POST", "/v1/w3s/transactions/contractExecution/estimateFee", request,
            model=EstimateFeeResponse,
        )

    def query_contract(
        self,
        blockchain: Blockchain,
        address: str,
        abi_function_signature: Optional[str] = None,
        abi_parameters: Optional[List[Any]] = None,
        abi_json: Optional[str] = None,
        call_data: Optional[str] = None,
        from_address: Optional[str] = None
    ) -> QueryContractResponse:
        """
        Call a read-only contract function. Nothing is sent on-chain.

        Raises:
            ValueError: If neither a function signature nor call data is given
        """
        if not abi_function_signature and not call_data:
            raise ValueError("Either abi_function_signature or call_data must be provided")
        request = QueryContractRequest(
            blockchain=blockchain,
            address=address,
            abi_function_signature=abi_function_signature,
            abi_parameters=abi_parameters,
            abi_json=abi_json,
            call_data=call_data,
            from_address=from_address,
        )
        return self.http.execute(
            "POST", "/v1/w3s/contracts/query", request, model=QueryContractResponse
        )

    def request_testnet_tokens(
        self,
        address: str,
        blockchain: Blockchain,
        native: Optional[bool] = None,
        usdc: Optional[bool] = None,
        eurc: Optional[bool] = None
    ) -> None:
        """
        Ask the faucet to drip testnet tokens to an address.

        The faucet answers a successful drip with an empty body.

        Raises:
            ApiError: If the faucet rejects the request
            DecodeResponseError: If a non-empty body is not a valid envelope
        """
        request = RequestTestnetTokensRequest(
            address=address, blockchain=blockchain, native=native, usdc=usdc, eurc=eurc
        )
        self.logger.info(f"Requesting testnet tokens for {address} on {request.blockchain.value}")
        self.http.execute_empty("POST", "/v1/faucet/drips", request)

    def delete_notification_subscription(self, subscription_id: str) -> None:
        """
        Remove a webhook notification subscription.

        Circle answers with 204 No Content.

        Raises:
            ApiError: If the subscription does not exist or cannot be removed
        """
        self.logger.info(f"Deleting notification subscription {subscription_id}")
        self.http.execute_no_content(
            "DELETE", f"/v2/notifications/subscriptions/{path_segment(subscription_id)}"
        )
