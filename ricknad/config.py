"""Configuration management for Ricknad."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class NetworkConfig(BaseSettings):
    """Network and signer configuration."""

    model_config = SettingsConfigDict(env_prefix="")

    monad_rpc_url: str = Field(default="https://testnet-rpc.monad.xyz", alias="MONAD_RPC_URL")
    monad_private_key: str = Field(default="", alias="MONAD_PRIVATE_KEY")


class Settings(BaseSettings):
    """Global settings."""

    model_config = SettingsConfigDict(env_prefix="RICKNAD_")

    # Storage
    storage_dir: str = ".ricknad"

    # Conversation memory
    max_previous_contracts: int = 5
    max_user_intents: int = 10

    # Chain
    min_deploy_balance: str = "0.01"  # MON
    request_timeout: int = 30  # seconds
    recent_blocks: int = 10

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


# Monad testnet
MONAD_TESTNET = {
    "chain_id": 10143,
    "name": "Monad Testnet",
    "rpc_url": "https://testnet-rpc.monad.xyz",
    "explorer_url": "https://testnet.monadexplorer.com",
    "faucet": "https://testnet.monad.xyz/",
    "currency": {
        "name": "Monad",
        "symbol": "MON",
        "decimals": 18,
    },
}

MONAD_RESOURCES = {
    "documentation": "https://docs.monad.xyz/",
    "github": "https://github.com/monad-developers",
    "explorer": "https://testnet.monadexplorer.com/",
    "blog": "https://www.monad.xyz/blog",
    "faucet": "https://testnet.monad.xyz/",
}

DEFAULT_CONTRACT_TEMPLATE = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.20;

contract SimpleStorage {
    uint256 private value;

    event ValueChanged(uint256 newValue);

    function setValue(uint256 _value) public {
        value = _value;
        emit ValueChanged(_value);
    }

    function getValue() public view returns (uint256) {
        return value;
    }
}"""


def explorer_address_url(address: str) -> str:
    """Explorer page for an address."""
    return f"{MONAD_TESTNET['explorer_url']}/address/{address}"


# Global instances
settings = Settings()
network_config = NetworkConfig()
