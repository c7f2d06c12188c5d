"""
Tests for the CircleOps and CircleView clients.
"""
import uuid

import pytest

from circle_sdk import (
    AccelerateTransactionRequestBuilder, CancelTransactionRequestBuilder, CircleOps,
    CircleSettings, CircleView, ContractExecutionTransactionRequestBuilder,
    CreateWalletRequestBuilder, ScaCore, SignDelegateRequestBuilder, SignMessageRequestBuilder,
    SignTransactionRequestBuilder, SignTypedDataRequestBuilder, TransferTransactionRequestBuilder,
    WalletUpgradeTransactionRequestBuilder,
)
from circle_sdk.exceptions import ApiError, ConfigError, DecodeResponseError
from circle_sdk.models import (
    Blockchain, EstimateContractExecutionFeeRequest, EstimateTransferFeeRequest, FeeLevel,
    ListTransactionsParams, ListWalletsParams, ListWalletsWithBalancesParams, TokenBalancesParams,
)
from circle_sdk.near import DelegateAction, KeyType, NearPublicKey, Transfer, encode_delegate_action
from conftest import (
    TEST_API_KEY, TEST_BASE_URL, TEST_ENTITY_SECRET, TEST_IDEMPOTENCY_KEY, TEST_WALLET_ID,
)

DEV = f"{TEST_BASE_URL}/v1/w3s/developer"
SECRET = bytes.fromhex(TEST_ENTITY_SECRET)
WALLET = {"id": TEST_WALLET_ID, "address": "0xabc", "blockchain": "ETH-SEPOLIA", "state": "LIVE"}


def _assert_fresh_secret(body, decrypt):
    assert decrypt(body["entitySecretCiphertext"]) == SECRET


# ---------------------------------------------------------------------------
# CircleOps
# ---------------------------------------------------------------------------

def test_create_wallet(ops, requests_mock, decrypt):
    requests_mock.post(f"{DEV}/wallets", json={"data": {"wallets": [WALLET]}})

    builder = CreateWalletRequestBuilder(wallet_set_id="ws-1", blockchains=[Blockchain.ETH_SEPOLIA])
    result = ops.create_wallet(builder)

    assert result.wallets[0].id == TEST_WALLET_ID
    body = requests_mock.last_request.json()
    assert body["walletSetId"] == "ws-1"
    assert body["blockchains"] == ["ETH-SEPOLIA"]
    assert uuid.UUID(body["idempotencyKey"]).version == 4
    _assert_fresh_secret(body, decrypt)
    assert requests_mock.last_request.headers["Authorization"] == f"Bearer {TEST_API_KEY}"


def test_retry_by_rebuilding(ops, requests_mock):
    """Calling twice with one builder sends distinct keys and ciphertexts"""
    requests_mock.post(f"{DEV}/wallets", json={"data": {"wallets": []}})
    builder = CreateWalletRequestBuilder(wallet_set_id="ws-1", blockchains=[Blockchain.ETH])

    ops.create_wallet(builder)
    ops.create_wallet(builder)
    first, second = [r.json() for r in requests_mock.request_history]
    assert first["idempotencyKey"] != second["idempotencyKey"]
    assert first["entitySecretCiphertext"] != second["entitySecretCiphertext"]


def test_retry_with_pinned_key(ops, requests_mock):
    requests_mock.post(f"{DEV}/wallets", json={"data": {"wallets": []}})
    builder = CreateWalletRequestBuilder(
        wallet_set_id="ws-1", blockchains=[Blockchain.ETH]
    ).with_idempotency_key(TEST_IDEMPOTENCY_KEY)

    ops.create_wallet(builder)
    ops.create_wallet(builder)
    first, second = [r.json() for r in requests_mock.request_history]
    assert first["idempotencyKey"] == second["idempotencyKey"] == TEST_IDEMPOTENCY_KEY
    assert first["entitySecretCiphertext"] != second["entitySecretCiphertext"]


def test_update_wallet(ops, requests_mock):
    requests_mock.put(
        f"{TEST_BASE_URL}/v1/w3s/wallets/{TEST_WALLET_ID}",
        json={"data": {"wallet": dict(WALLET, name="treasury")}},
    )
    result = ops.update_wallet(TEST_WALLET_ID, name="treasury")
    assert result.wallet.name == "treasury"
    assert requests_mock.last_request.json() == {"name": "treasury"}


def test_sign_message(ops, requests_mock, decrypt):
    requests_mock.post(f"{DEV}/sign/message", json={"data": {"signature": "0xsig"}})
    result = ops.sign_message(SignMessageRequestBuilder(wallet_id=TEST_WALLET_ID, message="hello"))
    assert result.signature == "0xsig"
    _assert_fresh_secret(requests_mock.last_request.json(), decrypt)


def test_sign_typed_data(ops, requests_mock):
    requests_mock.post(f"{DEV}/sign/typedData", json={"data": {"signature": "0xsig"}})
    result = ops.sign_typed_data(SignTypedDataRequestBuilder(wallet_id=TEST_WALLET_ID, data="{}"))
    assert result.signature == "0xsig"


def test_sign_transaction(ops, requests_mock):
    requests_mock.post(
        f"{DEV}/sign/transaction",
        json={"data": {"signature": "0xsig", "signedTransaction": "0xsigned", "txHash": "0xhash"}},
    )
    result = ops.sign_transaction(
        SignTransactionRequestBuilder(wallet_id=TEST_WALLET_ID, transaction='{"to":"0x1"}')
    )
    assert result.signed_transaction == "0xsigned"
    assert result.tx_hash == "0xhash"


def test_sign_delegate(ops, requests_mock, decrypt):
    requests_mock.post(
        f"{DEV}/sign/delegateAction",
        json={"data": {"signature": "sig", "signedDelegateAction": "signed"}},
    )
    action = DelegateAction(
        sender_id="alice.testnet",
        receiver_id="usdc.testnet",
        actions=[Transfer(1)],
        nonce=42,
        max_block_height=123456,
        public_key=NearPublicKey(KeyType.ED25519, bytes(32)),
    )

    result = ops.sign_delegate(SignDelegateRequestBuilder.from_delegate_action(TEST_WALLET_ID, action))
    assert result.signed_delegate_action == "signed"

    body = requests_mock.last_request.json()
    assert body["unsignedDelegateAction"] == encode_delegate_action(action)
    assert body["walletId"] == TEST_WALLET_ID
    _assert_fresh_secret(body, decrypt)


def test_create_transfer_transaction(ops, requests_mock):
    requests_mock.post(
        f"{DEV}/transactions/transfer", json={"data": {"id": "tx-1", "state": "INITIATED"}}
    )
    builder = TransferTransactionRequestBuilder(
        destination_address="0xdef", amounts=["0.01"], wallet_id=TEST_WALLET_ID, token_id="tok"
    )
    result = ops.create_transfer_transaction(builder)
    assert result.id == "tx-1"
    assert result.state == "INITIATED"
    assert requests_mock.last_request.json()["destinationAddress"] == "0xdef"


def test_cancel_and_accelerate(ops, requests_mock):
    requests_mock.post(f"{DEV}/transactions/tx-1/cancel", json={"data": {"id": "tx-1", "state": "CANCELLED"}})
    requests_mock.post(f"{DEV}/transactions/tx-1/accelerate", json={"data": {"id": "tx-1"}})

    assert ops.cancel_transaction(CancelTransactionRequestBuilder(transaction_id="tx-1")).state == "CANCELLED"
    assert ops.accelerate_transaction(AccelerateTransactionRequestBuilder(transaction_id="tx-1")).id == "tx-1"
    assert set(requests_mock.last_request.json()) == {"idempotencyKey", "entitySecretCiphertext"}


def test_create_contract_execution_transaction(ops, requests_mock, decrypt):
    requests_mock.post(
        f"{DEV}/transactions/contractExecution", json={"data": {"id": "tx-2", "state": "INITIATED"}}
    )
    builder = ContractExecutionTransactionRequestBuilder(
        wallet_id=TEST_WALLET_ID,
        contract_address="0xc0ffee",
        abi_function_signature="transfer(address,uint256)",
        abi_parameters=["0xdef", "1000"],
        fee_level=FeeLevel.MEDIUM,
    )
    result = ops.create_contract_execution_transaction(builder)

    assert result.id == "tx-2"
    body = requests_mock.last_request.json()
    assert body["contractAddress"] == "0xc0ffee"
    assert body["abiFunctionSignature"] == "transfer(address,uint256)"
    assert body["abiParameters"] == ["0xdef", "1000"]
    assert body["feeLevel"] == "MEDIUM"
    assert "callData" not in body
    assert uuid.UUID(body["idempotencyKey"]).version == 4
    _assert_fresh_secret(body, decrypt)


def test_contract_execution_with_call_data_and_signature_is_rejected(ops, requests_mock):
    builder = ContractExecutionTransactionRequestBuilder(
        wallet_id=TEST_WALLET_ID, contract_address="0xc0ffee",
        abi_function_signature="f()", call_data="0x12345678",
    )
    with pytest.raises(ValueError, match="call_data"):
        ops.create_contract_execution_transaction(builder)
    assert not requests_mock.called


def test_create_wallet_upgrade_transaction(ops, requests_mock):
    requests_mock.post(
        f"{DEV}/transactions/walletUpgrade", json={"data": {"id": "tx-3", "state": "INITIATED"}}
    )
    builder = WalletUpgradeTransactionRequestBuilder(
        wallet_id=TEST_WALLET_ID, new_sca_core=ScaCore.CIRCLE_6900_SINGLEOWNER_V3
    ).with_idempotency_key(TEST_IDEMPOTENCY_KEY)

    assert ops.create_wallet_upgrade_transaction(builder).id == "tx-3"
    body = requests_mock.last_request.json()
    assert body["newScaCore"] == "circle_6900_singleowner_v3"
    assert body["walletId"] == TEST_WALLET_ID
    assert body["idempotencyKey"] == TEST_IDEMPOTENCY_KEY


def test_api_error_surfaces(ops, requests_mock):
    requests_mock.post(f"{DEV}/sign/message", status_code=401, json={"code": 401, "message": "Malformed key"})
    with pytest.raises(ApiError) as exc_info:
        ops.sign_message(SignMessageRequestBuilder(wallet_id=TEST_WALLET_ID, message="hi"))
    assert exc_info.value.status == 401


def test_ops_from_settings(spki_pem):
    settings = CircleSettings.load(
        api_key=TEST_API_KEY,
        base_url=TEST_BASE_URL,
        entity_secret=TEST_ENTITY_SECRET,
        public_key=spki_pem,
        timeout=5,
        _env_file=None,
    )
    with CircleOps.from_settings(settings) as ops:
        assert ops.http.timeout == 5
        assert ops.encryptor.key_size == 2048


def test_ops_from_settings_without_secret():
    settings = CircleSettings.load(api_key=TEST_API_KEY, _env_file=None)
    with pytest.raises(ConfigError, match="CIRCLE_ENTITY_SECRET"):
        CircleOps.from_settings(settings)


# ---------------------------------------------------------------------------
# CircleView
# ---------------------------------------------------------------------------

def test_ping(view, requests_mock):
    requests_mock.get(f"{TEST_BASE_URL}/ping", json={"message": "pong"})
    assert view.ping().message == "pong"


def test_list_wallets(view, requests_mock):
    requests_mock.get(f"{TEST_BASE_URL}/v1/w3s/wallets", json={"data": {"wallets": [WALLET]}})

    result = view.list_wallets(ListWalletsParams(blockchain=Blockchain.ETH_SEPOLIA, page_size=10))
    assert [w.id for w in result.wallets] == [TEST_WALLET_ID]
    assert requests_mock.last_request.url == (
        f"{TEST_BASE_URL}/v1/w3s/wallets?pageSize=10&blockchain=ETH-SEPOLIA"
    )


def test_list_wallets_without_params(view, requests_mock):
    requests_mock.get(f"{TEST_BASE_URL}/v1/w3s/wallets", json={"data": {"wallets": []}})
    assert view.list_wallets().wallets == []
    assert requests_mock.last_request.url == f"{TEST_BASE_URL}/v1/w3s/wallets"


def test_get_wallet(view, requests_mock):
    requests_mock.get(f"{TEST_BASE_URL}/v1/w3s/wallets/{TEST_WALLET_ID}", json={"data": {"wallet": WALLET}})
    assert view.get_wallet(TEST_WALLET_ID).wallet.address == "0xabc"


def test_get_token_balances(view, requests_mock):
    requests_mock.get(
        f"{TEST_BASE_URL}/v1/w3s/wallets/{TEST_WALLET_ID}/balances",
        json={"data": {"tokenBalances": [{"amount": "12.5", "token": {"symbol": "USDC"}}]}},
    )
    result = view.get_token_balances(TEST_WALLET_ID, TokenBalancesParams(include_all=True))
    assert result.token_balances[0].amount == "12.5"
    assert requests_mock.last_request.url.endswith("/balances?includeAll=true")


def test_list_and_get_transactions(view, requests_mock):
    tx = {"id": "tx-1", "state": "COMPLETE", "amounts": ["1"]}
    requests_mock.get(f"{TEST_BASE_URL}/v1/w3s/transactions", json={"data": {"transactions": [tx]}})
    requests_mock.get(f"{TEST_BASE_URL}/v1/w3s/transactions/tx-1", json={"data": {"transaction": tx}})

    listed = view.list_transactions(ListTransactionsParams(wallet_ids=TEST_WALLET_ID, state="COMPLETE"))
    assert listed.transactions[0].id == "tx-1"
    assert "state=COMPLETE" in requests_mock.request_history[0].url

    assert view.get_transaction("tx-1").transaction.amounts == ["1"]


def test_validate_address(view, requests_mock):
    requests_mock.post(
        f"{TEST_BASE_URL}/v1/w3s/transactions/validateAddress", json={"data": {"isValid": True}}
    )
    assert view.validate_address("0xabc", Blockchain.ETH_SEPOLIA).is_valid is True
    assert requests_mock.last_request.json() == {"address": "0xabc", "blockchain": "ETH-SEPOLIA"}


def test_request_testnet_tokens(view, requests_mock):
    requests_mock.post(f"{TEST_BASE_URL}/v1/faucet/drips", status_code=204, text="")

    assert view.request_testnet_tokens("0xabc", Blockchain.ARC_TESTNET, usdc=True) is None
    assert requests_mock.last_request.json() == {
        "address": "0xabc", "blockchain": "ARC-TESTNET", "usdc": True,
    }


def test_request_testnet_tokens_bad_body(view, requests_mock):
    requests_mock.post(f"{TEST_BASE_URL}/v1/faucet/drips", text="drip queued")
    with pytest.raises(DecodeResponseError):
        view.request_testnet_tokens("0xabc", Blockchain.ETH_SEPOLIA, native=True)


def test_view_from_settings_needs_no_secret():
    settings = CircleSettings.load(api_key=TEST_API_KEY, base_url=TEST_BASE_URL, _env_file=None)
    with CircleView.from_settings(settings) as view:
        assert view.http.has_credentials


def test_path_ids_are_escaped(view, requests_mock):
    requests_mock.get(f"{TEST_BASE_URL}/v1/w3s/wallets/a%2Fb", json={"data": {"wallet": WALLET}})
    view.get_wallet("a/b")
    assert requests_mock.last_request.url.endswith("/v1/w3s/wallets/a%2Fb")


def test_get_nfts(view, requests_mock):
    requests_mock.get(
        f"{TEST_BASE_URL}/v1/w3s/wallets/{TEST_WALLET_ID}/nfts",
        json={"data": {"nfts": [{"amount": "1", "nftTokenId": "7", "token": {"standard": "ERC721"}}]}},
    )
    result = view.get_nfts(TEST_WALLET_ID, TokenBalancesParams(page_size=5))
    assert result.nfts[0].nft_token_id == "7"
    assert result.nfts[0].token["standard"] == "ERC721"
    assert requests_mock.last_request.url.endswith("/nfts?pageSize=5")


def test_list_wallets_with_token_balances(view, requests_mock):
    wallet = dict(WALLET, tokenBalances=[{"amount": "3", "token": {"symbol": "USDC"}}])
    requests_mock.get(
        f"{TEST_BASE_URL}/v1/w3s/wallets/balances", json={"data": {"wallets": [wallet]}}
    )
    params = ListWalletsWithBalancesParams(blockchain=Blockchain.ETH_SEPOLIA, amount_gte="1.5")
    result = view.list_wallets_with_token_balances(params)

    assert result.wallets[0].id == TEST_WALLET_ID
    assert result.wallets[0].token_balances[0].amount == "3"
    url = requests_mock.last_request.url
    assert "blockchain=ETH-SEPOLIA" in url
    assert "amount__gte=1.5" in url


def test_estimate_transfer_fee(view, requests_mock):
    requests_mock.post(
        f"{TEST_BASE_URL}/v1/w3s/transactions/transfer/estimateFee",
        json={"data": {
            "low": {"gasLimit": "21000", "maxFee": "1.1"},
            "medium": {"gasLimit": "21000", "maxFee": "1.5"},
            "high": {"gasLimit": "21000", "maxFee": "2.0", "networkFee": "0.00004"},
        }},
    )
    request = EstimateTransferFeeRequest(
        destination_address="0xdef", amounts=["0.5"], wallet_id=TEST_WALLET_ID, token_id="tok"
    )
    result = view.estimate_transfer_fee(request)

    assert result.medium.max_fee == "1.5"
    assert result.high.network_fee == "0.00004"
    body = requests_mock.last_request.json()
    assert body == {
        "destinationAddress": "0xdef", "amounts": ["0.5"], "walletId": TEST_WALLET_ID, "tokenId": "tok",
    }
    assert "entitySecretCiphertext" not in body


def test_estimate_transfer_fee_needs_source(view, requests_mock):
    request = EstimateTransferFeeRequest(destination_address="0xdef", amounts=["1"])
    with pytest.raises(ValueError, match="source_address"):
        view.estimate_transfer_fee(request)
    assert not requests_mock.called


def test_estimate_contract_execution_fee(view, requests_mock):
    requests_mock.post(
        f"{TEST_BASE_URL}/v1/w3s/transactions/contractExecution/estimateFee",
        json={"data": {"low": {"gasLimit": "50000"}, "callGasLimit": "45000"}},
    )
    request = EstimateContractExecutionFeeRequest(
        contract_address="0xc0ffee", call_data="0x12345678", wallet_id=TEST_WALLET_ID
    )
    result = view.estimate_contract_execution_fee(request)
    assert result.low.gas_limit == "50000"
    assert result.call_gas_limit == "45000"
    assert result.medium is None


def test_query_contract(view, requests_mock):
    requests_mock.post(
        f"{TEST_BASE_URL}/v1/w3s/contracts/query",
        json={"data": {"outputValues": ["1000"], "outputData": "0x03e8"}},
    )
    result = view.query_contract(
        Blockchain.ETH_SEPOLIA, "0xc0ffee",
        abi_function_signature="balanceOf(address)", abi_parameters=["0xabc"],
    )
    assert result.output_values == ["1000"]
    assert result.output_data == "0x03e8"
    assert requests_mock.last_request.json() == {
        "blockchain": "ETH-SEPOLIA",
        "address": "0xc0ffee",
        "abiFunctionSignature": "balanceOf(address)",
        "abiParameters": ["0xabc"],
    }


def test_query_contract_needs_call(view):
    with pytest.raises(ValueError):
        view.query_contract(Blockchain.ETH_SEPOLIA, "0xc0ffee")


def test_delete_notification_subscription(view, requests_mock):
    requests_mock.delete(f"{TEST_BASE_URL}/v2/notifications/subscriptions/sub-1", status_code=204)
    assert view.delete_notification_subscription("sub-1") is None
    assert requests_mock.last_request.method == "DELETE"


def test_delete_notification_subscription_not_found(view, requests_mock):
    requests_mock.delete(
        f"{TEST_BASE_URL}/v2/notifications/subscriptions/missing",
        status_code=404, json={"code": 156004, "message": "Subscription not found"},
    )
    with pytest.raises(ApiError) as exc_info:
        view.delete_notification_subscription("missing")
    assert exc_info.value.status == 404
    assert exc_info.value.message == "Subscription not found"
