"""Unit tests for the RPC client. Nothing here touches the network."""

import asyncio
import json
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import httpx
import pytest
from web3.exceptions import Web3Exception

from ricknad.chain.rpc import DeploymentResult, RPCClient, format_address
from ricknad.config import network_config
from ricknad.errors import ConfigurationError, DeploymentError, RPCError

RPC_URL = "https://rpc.test"
ACCOUNT = "0x00000000000000000000000000000000000000a1"
OTHER = "0x00000000000000000000000000000000000000b2"
CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
PRIVATE_KEY = "0x" + "11" * 32


def block(number: int, *txs: dict) -> dict:
    return {"number": hex(number), "timestamp": hex(1_700_000_000 + number), "transactions": list(txs)}


def tx(tx_hash: str, sender: str, to: str | None, value: int = 0) -> dict:
    return {"hash": tx_hash, "from": sender, "to": to, "value": hex(value)}


@pytest.fixture
def client() -> RPCClient:
    return RPCClient(RPC_URL, timeout=5)


class TestFormatAddress:
    def test_shortens(self):
        assert format_address("0x1234567890abcdef1234567890abcdef12345678") == "0x1234...5678"

    def test_short_values_unchanged(self):
        assert format_address("0x1234") == "0x1234"
        assert format_address("") == ""


class TestClientSetup:
    def test_defaults(self, client: RPCClient):
        assert client.rpc_url == RPC_URL
        assert client.chain_id == 10143
        assert client.timeout == 5.0

    def test_missing_rpc_url(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(network_config, "monad_rpc_url", "")
        with pytest.raises(ConfigurationError):
            RPCClient()


class TestBalance:
    def test_get_balance_in_mon(self, client: RPCClient):
        client.w3 = MagicMock()
        client.w3.eth.get_balance = AsyncMock(return_value=1_500_000_000_000_000_000)
        assert asyncio.run(client.get_balance(ACCOUNT)) == Decimal("1.5")

    @pytest.mark.parametrize(
        "wei,expected",
        [
            (10**16, True),
            (10**16 - 1, False),
        ],
    )
    def test_has_enough_balance(self, client: RPCClient, wei: int, expected: bool):
        client.w3 = MagicMock()
        client.w3.eth.get_balance = AsyncMock(return_value=wei)
        assert asyncio.run(client.has_enough_balance(ACCOUNT)) is expected

    def test_custom_minimum(self, client: RPCClient):
        client.w3 = MagicMock()
        client.w3.eth.get_balance = AsyncMock(return_value=10**18)
        assert asyncio.run(client.has_enough_balance(ACCOUNT, "2")) is False

    @pytest.mark.parametrize(
        "error",
        [aiohttp.ClientConnectionError("Cannot connect to host"), asyncio.TimeoutError(), ConnectionRefusedError()],
    )
    def test_transport_error(self, client: RPCClient, error: Exception):
        client.w3 = MagicMock()
        client.w3.eth.get_balance = AsyncMock(side_effect=error)
        with pytest.raises(RPCError):
            asyncio.run(client.has_enough_balance(ACCOUNT))

    def test_bad_address_is_value_error(self, client: RPCClient):
        with pytest.raises(ValueError):
            asyncio.run(client.get_balance("0x1234"))


class TestBatchRequest:
    def test_results_in_call_order(self, client: RPCClient):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            batch = json.loads(request.content)
            seen.extend(batch)
            results = [{"jsonrpc": "2.0", "id": call["id"], "result": call["method"]} for call in batch]
            return httpx.Response(200, json=list(reversed(results)))

        async def run():
            client._http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
            try:
                return await client.batch_request([("eth_chainId", []), ("eth_blockNumber", [])])
            finally:
                await client.close()

        assert asyncio.run(run()) == ["eth_chainId", "eth_blockNumber"]
        assert [call["id"] for call in seen] == [0, 1]
        assert client._http_client is None

    def test_empty_batch(self, client: RPCClient):
        assert asyncio.run(client.batch_request([])) == []

    def test_http_error(self, client: RPCClient):
        async def run():
            client._http_client = httpx.AsyncClient(
                transport=httpx.MockTransport(lambda request: httpx.Response(500))
            )
            try:
                await client.batch_request([("eth_chainId", [])])
            finally:
                await client.close()

        with pytest.raises(RPCError, match="Batch request failed"):
            asyncio.run(run())

    @pytest.mark.parametrize(
        "handler",
        [
            lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "error": {"code": -32600}}),
            lambda request: httpx.Response(200, text="not json"),
        ],
    )
    def test_unusable_reply(self, client: RPCClient, handler):
        async def run():
            client._http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
            try:
                await client.batch_request([("eth_chainId", [])])
            finally:
                await client.close()

        with pytest.raises(RPCError):
            asyncio.run(run())

    def test_connection_refused(self, client: RPCClient):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async def run():
            client._http_client = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
            try:
                await client.batch_request([("eth_chainId", [])])
            finally:
                await client.close()

        with pytest.raises(RPCError, match="connection refused"):
            asyncio.run(run())


class TestRecentTransactions:
    def test_filters_by_address(self, client: RPCClient):
        client.get_block_number = AsyncMock(return_value=100)
        client.batch_request = AsyncMock(return_value=[
            block(100, tx("0x01", ACCOUNT, OTHER, 10**18), tx("0x02", OTHER, OTHER)),
            None,
            block(98, tx("0x03", OTHER, ACCOUNT.upper().replace("0X", "0x")), tx("0x04", ACCOUNT, None)),
        ])

        txs = asyncio.run(client.get_recent_transactions(ACCOUNT, blocks=3))

        calls = client.batch_request.await_args.args[0]
        assert calls == [
            ("eth_getBlockByNumber", ["0x64", True]),
            ("eth_getBlockByNumber", ["0x63", True]),
            ("eth_getBlockByNumber", ["0x62", True]),
        ]
        assert [t["hash"] for t in txs] == ["0x01", "0x03", "0x04"]
        assert txs[0]["value"] == Decimal(1)
        assert txs[0]["block_number"] == 100
        assert txs[1]["timestamp"] == 1_700_000_098
        assert txs[2]["to"] is None

    def test_limit(self, client: RPCClient):
        client.get_block_number = AsyncMock(return_value=5)
        client.batch_request = AsyncMock(return_value=[
            block(5, tx("0x01", ACCOUNT, OTHER), tx("0x02", ACCOUNT, OTHER), tx("0x03", ACCOUNT, OTHER)),
        ])
        txs = asyncio.run(client.get_recent_transactions(ACCOUNT, limit=2, blocks=1))
        assert [t["hash"] for t in txs] == ["0x01", "0x02"]

    def test_never_scans_below_genesis(self, client: RPCClient):
        client.get_block_number = AsyncMock(return_value=1)
        client.batch_request = AsyncMock(return_value=[])
        asyncio.run(client.get_recent_transactions(ACCOUNT, blocks=10))
        calls = client.batch_request.await_args.args[0]
        assert [params[0] for _, params in calls] == ["0x1", "0x0"]


class TestDeployContract:
    """Deployment with a fully mocked web3."""

    @pytest.fixture
    def w3(self, client: RPCClient) -> MagicMock:
        w3 = MagicMock()
        account = w3.eth.account.from_key.return_value
        account.address = ACCOUNT
        account.sign_transaction.return_value.raw_transaction = b"signed"
        w3.eth.get_transaction_count = AsyncMock(return_value=7)
        w3.eth.contract.return_value.constructor.return_value.build_transaction = AsyncMock(return_value={"data": "0x"})
        w3.eth.send_raw_transaction = AsyncMock(return_value=b"\x12" * 32)
        w3.eth.wait_for_transaction_receipt = AsyncMock(
            return_value={"status": 1, "contractAddress": CONTRACT_ADDRESS}
        )
        client.w3 = w3
        return w3

    def test_success(self, client: RPCClient, w3: MagicMock):
        result = asyncio.run(client.deploy_contract([], "0x6080", PRIVATE_KEY, [1]))
        assert result == DeploymentResult(address=CONTRACT_ADDRESS, tx_hash="0x" + "12" * 32)

        w3.eth.contract.assert_called_once_with(abi=[], bytecode="0x6080")
        w3.eth.contract.return_value.constructor.assert_called_once_with(1)
        params = w3.eth.contract.return_value.constructor.return_value.build_transaction.await_args.args[0]
        assert params == {"from": ACCOUNT, "nonce": 7, "chainId": 10143}
        w3.eth.send_raw_transaction.assert_awaited_once_with(b"signed")

    def test_reverted(self, client: RPCClient, w3: MagicMock):
        w3.eth.wait_for_transaction_receipt.return_value = {"status": 0, "contractAddress": None}
        with pytest.raises(DeploymentError, match="reverted"):
            asyncio.run(client.deploy_contract([], "0x6080", PRIVATE_KEY))

    def test_web3_error_wrapped(self, client: RPCClient, w3: MagicMock):
        w3.eth.send_raw_transaction.side_effect = Web3Exception("nonce too low")
        with pytest.raises(DeploymentError, match="nonce too low"):
            asyncio.run(client.deploy_contract([], "0x6080", PRIVATE_KEY))

    def test_transport_error_wrapped(self, client: RPCClient, w3: MagicMock):
        w3.eth.get_transaction_count.side_effect = aiohttp.ClientConnectionError("Cannot connect to host")
        with pytest.raises(DeploymentError, match="Cannot connect"):
            asyncio.run(client.deploy_contract([], "0x6080", PRIVATE_KEY))

    def test_missing_private_key(self, client: RPCClient, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(network_config, "monad_private_key", "")
        with pytest.raises(ConfigurationError):
            asyncio.run(client.deploy_contract([], "0x6080"))
