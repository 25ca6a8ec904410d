"""Conversational front end over the generator, compiler and chain client."""

import logging
import time
import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ricknad.chain.abi import CompilationArtifact, PseudoCompiler
from ricknad.chain.rpc import RPCClient, format_address
from ricknad.config import MONAD_TESTNET, explorer_address_url, settings
from ricknad.errors import InsufficientBalanceError, RicknadError
from ricknad.generator import ConversationState, GeneratedContract, describe_contract, generate_contract
from ricknad.storage.contracts import DeployedContract, DeployedContractStore

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Hi, I'm Ricknad. Describe the smart contract you want for the Monad testnet, "
    "for example \"create an ERC20 token called MonadCoin with mint and burn\", "
    "and I'll write the Solidity for you."
)


class Role(str, Enum):
    """Message role."""
    USER = "user"
    ASSISTANT = "assistant"


class ContractData(BaseModel):
    """Contract attached to an assistant message."""
    name: str
    type: str
    code: str
    abi: list[dict[str, Any]] | None = None
    bytecode: str | None = None
    address: str | None = None


class Message(BaseModel):
    """Chat message."""
    role: Role
    content: str
    timestamp: int = Field(default_factory=lambda: int(time.time() * 1000))
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    contract_data: ContractData | None = None


class ChatSession:
    """One conversation: messages, conversation state and the current contract."""

    def __init__(self, compiler: PseudoCompiler | None = None):
        self.compiler = compiler or PseudoCompiler()
        self.state = ConversationState()
        self.current: GeneratedContract | None = None
        self.artifact: CompilationArtifact | None = None
        self.messages: list[Message] = [Message(role=Role.ASSISTANT, content=WELCOME_MESSAGE)]

    def _reply(self, content: str, contract_data: ContractData | None = None) -> Message:
        message = Message(role=Role.ASSISTANT, content=content, contract_data=contract_data)
        self.messages.append(message)
        return message

    def _contract_data(self, contract: GeneratedContract, **extra: Any) -> ContractData:
        data = ContractData(name=contract.name, type=contract.type.value, code=contract.code)
        if self.artifact is not None:
            data.abi = self.artifact.abi
            data.bytecode = self.artifact.bytecode
        return data.model_copy(update=extra)

    def send(self, text: str) -> Message | None:
        """Record a user prompt and reply with a generated contract."""
        if not text or not text.strip():
            return None

        self.messages.append(Message(role=Role.USER, content=text))
        contract, self.state = generate_contract(text, self.state)
        self.current = contract
        self.artifact = None
        return self._reply(describe_contract(contract), self._contract_data(contract))

    def compile(self) -> Message:
        """Attach a pseudo-ABI and sample bytecode to the current contract."""
        if self.current is None:
            return self._reply("There is no contract to compile yet. Describe one first.")

        try:
            self.artifact = self.compiler.compile(self.current.code, self.current.type)
        except RicknadError as e:
            logger.warning("Compilation failed: %s", e)
            return self._reply(f"Compilation failed: {e}")

        functions = sum(1 for entry in self.artifact.abi if entry["type"] == "function")
        return self._reply(
            f"Compiled {self.current.name}: {functions} functions in the ABI. "
            "The bytecode is a simulated sample; you can deploy it now.",
            self._contract_data(self.current),
        )

    async def deploy(
        self,
        rpc: RPCClient,
        private_key: str,
        store: DeployedContractStore | None = None,
    ) -> Message:
        """Deploy the compiled contract and record it. Errors become replies."""
        if self.current is None or self.artifact is None:
            return self._reply("Compile the contract before deploying it.")

        try:
            deployer = rpc.w3.eth.account.from_key(private_key).address
            if not await rpc.has_enough_balance(deployer):
                raise InsufficientBalanceError(
                    f"{format_address(deployer)} needs at least {settings.min_deploy_balance} "
                    f"{MONAD_TESTNET['currency']['symbol']} to deploy. Get some from {MONAD_TESTNET['faucet']}"
                )
            result = await rpc.deploy_contract(self.artifact.abi, self.artifact.bytecode, private_key)
        except (RicknadError, ValueError) as e:
            logger.warning("Deployment failed: %s", e)
            return self._reply(f"Deployment failed: {e}")

        if store is not None:
            store.add(DeployedContract(
                name=self.current.name,
                address=result.address,
                abi=self.artifact.abi,
                bytecode=self.artifact.bytecode,
                deployment_tx=result.tx_hash,
                type=self.current.type.value,
                source_code=self.current.code,
            ))

        return self._reply(
            f"Deployed {self.current.name} at {result.address}. "
            f"View it on the explorer: {explorer_address_url(result.address)}",
            self._contract_data(self.current, address=result.address),
        )
