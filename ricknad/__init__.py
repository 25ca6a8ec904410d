"""Ricknad: Monad testnet contract generator and toolkit."""

__version__ = "0.1.0"
