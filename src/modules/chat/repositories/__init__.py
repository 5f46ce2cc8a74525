from .chat_repository import ChatRepository

__all__ = ['ChatRepository']
