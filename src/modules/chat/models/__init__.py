from .chat_message import ChatMessage, GUEST_PREFIX

__all__ = ['ChatMessage', 'GUEST_PREFIX']
