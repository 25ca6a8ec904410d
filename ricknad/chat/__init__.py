"""Chat session over the contract generator."""

from ricknad.chat.session import ChatSession, ContractData, Message, Role

__all__ = ["ChatSession", "ContractData", "Message", "Role"]
