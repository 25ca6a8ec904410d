"""Exception hierarchy for Ricknad."""


class RicknadError(Exception):
    """Base class for all Ricknad errors."""


class CompileError(RicknadError, ValueError):
    """Source could not be turned into a compilation artifact."""


class StorageError(RicknadError):
    """Persisted data could not be read or written."""


class DeploymentError(RicknadError):
    """A contract deployment failed or reverted."""


class InsufficientBalanceError(DeploymentError):
    """Deployer balance is below the configured minimum."""


class ConfigurationError(RicknadError, ValueError):
    """Required configuration (RPC URL, private key) is missing."""


class RPCError(RicknadError):
    """The RPC endpoint could not be reached or sent an unusable reply."""
