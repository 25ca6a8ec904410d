"""Unit tests for the chat session."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from ricknad.chain.rpc import DeploymentResult, RPCClient
from ricknad.chat import ChatSession, Role
from ricknad.chat.session import WELCOME_MESSAGE
from ricknad.errors import DeploymentError, RPCError
from ricknad.generator import ContractType
from ricknad.storage import DeployedContractStore

DEPLOYER = "0x00000000000000000000000000000000000000d1"
CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
PRIVATE_KEY = "0x" + "11" * 32


@pytest.fixture
def session() -> ChatSession:
    return ChatSession()


@pytest.fixture
def rpc() -> MagicMock:
    client = MagicMock()
    client.w3.eth.account.from_key.return_value.address = DEPLOYER
    client.has_enough_balance = AsyncMock(return_value=True)
    client.deploy_contract = AsyncMock(return_value=DeploymentResult(address=CONTRACT_ADDRESS, tx_hash="0xfeed"))
    return client


class TestSend:
    def test_welcome_message(self, session: ChatSession):
        assert len(session.messages) == 1
        assert session.messages[0].role == Role.ASSISTANT
        assert session.messages[0].content == WELCOME_MESSAGE

    def test_blank_input(self, session: ChatSession):
        assert session.send("   ") is None
        assert len(session.messages) == 1

    def test_generates_contract(self, session: ChatSession):
        reply = session.send("create an ERC20 token called MonadCoin with mint and burn")
        assert reply.role == Role.ASSISTANT
        assert "MonadCoin" in reply.content
        assert reply.contract_data.name == "MonadCoin"
        assert reply.contract_data.type == "erc20"
        assert "contract MonadCoin is ERC20" in reply.contract_data.code
        assert reply.contract_data.abi is None
        assert [m.role for m in session.messages] == [Role.ASSISTANT, Role.USER, Role.ASSISTANT]

    def test_follow_up_uses_state(self, session: ChatSession):
        session.send("an nft named Cats")
        reply = session.send("add pausable")
        assert reply.contract_data.type == ContractType.ERC721.value
        assert len(session.state.previous_contracts) == 1

    def test_message_ids_unique(self, session: ChatSession):
        session.send("a staking pool")
        ids = [m.id for m in session.messages]
        assert len(ids) == len(set(ids))


class TestCompile:
    def test_nothing_to_compile(self, session: ChatSession):
        reply = session.compile()
        assert reply.content.startswith("There is no contract to compile yet")
        assert session.artifact is None

    def test_attaches_abi(self, session: ChatSession):
        session.send("make a 3 of 5 multisig wallet")
        reply = session.compile()
        assert reply.content.startswith("Compiled RickMultiSig:")
        assert reply.contract_data.abi
        assert reply.contract_data.bytecode.startswith("0x")
        assert session.artifact is not None

    def test_new_prompt_resets_artifact(self, session: ChatSession):
        session.send("a staking pool")
        session.compile()
        session.send("an escrow")
        assert session.artifact is None


class TestDeploy:
    def test_requires_compile(self, session: ChatSession, rpc: MagicMock):
        session.send("a staking pool")
        reply = asyncio.run(session.deploy(rpc, PRIVATE_KEY))
        assert reply.content == "Compile the contract before deploying it."
        rpc.deploy_contract.assert_not_called()

    def test_success_records_contract(self, session: ChatSession, rpc: MagicMock, contract_store: DeployedContractStore):
        session.send("create an ERC20 token called MonadCoin with mint and burn")
        session.compile()
        reply = asyncio.run(session.deploy(rpc, PRIVATE_KEY, contract_store))

        assert reply.content.startswith(f"Deployed MonadCoin at {CONTRACT_ADDRESS}.")
        assert f"https://testnet.monadexplorer.com/address/{CONTRACT_ADDRESS}" in reply.content
        assert reply.contract_data.address == CONTRACT_ADDRESS

        rpc.has_enough_balance.assert_awaited_once_with(DEPLOYER)
        abi, bytecode, key = rpc.deploy_contract.await_args.args
        assert bytecode == session.artifact.bytecode
        assert key == PRIVATE_KEY

        saved = contract_store.get(CONTRACT_ADDRESS)
        assert saved.name == "MonadCoin"
        assert saved.type == "erc20"
        assert saved.deployment_tx == "0xfeed"
        assert saved.source_code == session.current.code

    def test_insufficient_balance(self, session: ChatSession, rpc: MagicMock):
        rpc.has_enough_balance.return_value = False
        session.send("a staking pool")
        session.compile()
        reply = asyncio.run(session.deploy(rpc, PRIVATE_KEY))
        assert reply.content.startswith("Deployment failed:")
        assert "needs at least 0.01 MON" in reply.content
        rpc.deploy_contract.assert_not_called()

    def test_deployment_error_becomes_message(self, session: ChatSession, rpc: MagicMock, contract_store: DeployedContractStore):
        rpc.deploy_contract.side_effect = DeploymentError("reverted")
        session.send("a staking pool")
        session.compile()
        reply = asyncio.run(session.deploy(rpc, PRIVATE_KEY, contract_store))
        assert reply.content == "Deployment failed: reverted"
        assert contract_store.list() == []

    def test_bad_private_key_becomes_message(self, session: ChatSession, rpc: MagicMock):
        rpc.w3.eth.account.from_key.side_effect = ValueError("bad key")
        session.send("a staking pool")
        session.compile()
        reply = asyncio.run(session.deploy(rpc, "nope"))
        assert reply.content == "Deployment failed: bad key"

    def test_rpc_error_becomes_message(self, session: ChatSession, rpc: MagicMock, contract_store: DeployedContractStore):
        rpc.has_enough_balance.side_effect = RPCError("Could not read the balance: timed out")
        session.send("a staking pool")
        session.compile()
        reply = asyncio.run(session.deploy(rpc, PRIVATE_KEY, contract_store))
        assert reply.content == "Deployment failed: Could not read the balance: timed out"
        assert session.messages[-1] is reply
        assert contract_store.list() == []

    def test_unreachable_node_becomes_message(self, session: ChatSession):
        client = RPCClient("http://127.0.0.1:9")
        client.w3 = MagicMock()
        client.w3.eth.account.from_key.return_value.address = DEPLOYER
        client.w3.eth.get_balance = AsyncMock(side_effect=aiohttp.ClientConnectionError("Cannot connect to host 127.0.0.1:9"))
        session.send("a staking pool")
        session.compile()
        reply = asyncio.run(session.deploy(client, PRIVATE_KEY))
        assert reply.content.startswith("Deployment failed: Could not read the balance")
        assert "Cannot connect" in reply.content
