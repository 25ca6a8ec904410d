"""Blockchain interaction modules."""

from ricknad.chain.abi import CompilationArtifact, PseudoCompiler
from ricknad.chain.rpc import DeploymentResult, RPCClient, format_address

__all__ = ["CompilationArtifact", "DeploymentResult", "PseudoCompiler", "RPCClient", "format_address"]
