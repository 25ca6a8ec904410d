"""RPC client for the Monad testnet."""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import aiohttp
import httpx
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import Web3Exception

from ricknad.config import MONAD_TESTNET, network_config, settings
from ricknad.errors import ConfigurationError, DeploymentError, RPCError

logger = logging.getLogger(__name__)

# Failures talking to the node, from either the web3 provider or the batch client
TRANSPORT_ERRORS = (aiohttp.ClientError, httpx.HTTPError, asyncio.TimeoutError, OSError, Web3Exception)


def format_address(address: str) -> str:
    """Shorten an address to `0x1234...5678`."""
    if not address or len(address) < 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


@dataclass
class DeploymentResult:
    """Address and transaction hash of a deployed contract."""
    address: str
    tx_hash: str


class RPCClient:
    """Async RPC client with JSON-RPC batching."""

    def __init__(self, rpc_url: str | None = None, timeout: float | None = None):
        self.rpc_url = rpc_url or network_config.monad_rpc_url
        if not self.rpc_url:
            raise ConfigurationError("MONAD_RPC_URL is not configured")

        self.chain_id = MONAD_TESTNET["chain_id"]
        self.timeout = float(timeout if timeout is not None else settings.request_timeout)
        self.w3 = AsyncWeb3(AsyncHTTPProvider(self.rpc_url))
        self._http_client: httpx.AsyncClient | None = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def get_block_number(self) -> int:
        """Get latest block number."""
        try:
            return await self.w3.eth.block_number
        except TRANSPORT_ERRORS as e:
            raise RPCError(f"Could not read the block number: {e}") from e

    async def get_balance(self, address: str) -> Decimal:
        """Native balance in MON."""
        checksum = Web3.to_checksum_address(address)
        try:
            wei = await self.w3.eth.get_balance(checksum)
        except TRANSPORT_ERRORS as e:
            raise RPCError(f"Could not read the balance of {format_address(checksum)}: {e}") from e
        return Web3.from_wei(wei, "ether")

    async def has_enough_balance(self, address: str, minimum: Decimal | str | None = None) -> bool:
        """Whether `address` holds at least `minimum` MON."""
        required = Decimal(str(minimum if minimum is not None else settings.min_deploy_balance))
        return await self.get_balance(address) >= required

    async def batch_request(self, calls: list[tuple[str, list[Any]]]) -> list[Any]:
        """Send `(method, params)` pairs as one JSON-RPC batch, results in call order."""
        if not calls:
            return []

        client = await self._get_http_client()
        batch = [
            {"jsonrpc": "2.0", "method": method, "params": params, "id": i}
            for i, (method, params) in enumerate(calls)
        ]
        try:
            response = await client.post(
                self.rpc_url,
                json=batch,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            results = response.json()
        except TRANSPORT_ERRORS + (ValueError,) as e:
            raise RPCError(f"Batch request failed: {e}") from e

        if not isinstance(results, list):
            raise RPCError(f"Unexpected batch reply: {str(results)[:200]}")
        results.sort(key=lambda x: x["id"])
        return [r.get("result") for r in results]

    async def get_recent_transactions(
        self,
        address: str,
        limit: int = 10,
        blocks: int | None = None,
    ) -> list[dict[str, Any]]:
        """Transactions from or to `address` in the most recent blocks, newest first."""
        blocks = blocks or settings.recent_blocks
        latest = await self.get_block_number()
        numbers = [n for n in range(latest, latest - blocks, -1) if n >= 0]
        results = await self.batch_request(
            [("eth_getBlockByNumber", [hex(n), True]) for n in numbers]
        )

        target = address.lower()
        transactions: list[dict[str, Any]] = []
        for block in results:
            if not block:
                continue
            for tx in block.get("transactions", []):
                sender = (tx.get("from") or "").lower()
                recipient = (tx.get("to") or "").lower()
                if target not in (sender, recipient):
                    continue
                transactions.append({
                    "hash": tx["hash"],
                    "from": tx.get("from"),
                    "to": tx.get("to"),
                    "value": Web3.from_wei(int(tx.get("value", "0x0"), 16), "ether"),
                    "block_number": int(block["number"], 16),
                    "timestamp": int(block["timestamp"], 16),
                })
                if len(transactions) >= limit:
                    return transactions
        return transactions

    async def deploy_contract(
        self,
        abi: list[dict[str, Any]],
        bytecode: str,
        private_key: str | None = None,
        constructor_args: list[Any] | None = None,
    ) -> DeploymentResult:
        """Sign a deployment locally, send it and wait for the receipt."""
        private_key = private_key or network_config.monad_private_key
        if not private_key:
            raise ConfigurationError("MONAD_PRIVATE_KEY is not configured")

        try:
            account = self.w3.eth.account.from_key(private_key)
            contract = self.w3.eth.contract(abi=abi, bytecode=bytecode)
            nonce = await self.w3.eth.get_transaction_count(account.address)
            tx = await contract.constructor(*(constructor_args or [])).build_transaction({
                "from": account.address,
                "nonce": nonce,
                "chainId": self.chain_id,
            })
            signed = account.sign_transaction(tx)
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
            logger.info("Deployment sent: %s", Web3.to_hex(tx_hash))
            receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.timeout)
        except TRANSPORT_ERRORS + (ValueError,) as e:
            raise DeploymentError(f"Deployment failed: {e}") from e

        if receipt["status"] != 1 or not receipt.get("contractAddress"):
            raise DeploymentError(f"Deployment reverted in transaction {Web3.to_hex(tx_hash)}")

        result = DeploymentResult(address=receipt["contractAddress"], tx_hash=Web3.to_hex(tx_hash))
        logger.info("Contract deployed at %s", result.address)
        return result
