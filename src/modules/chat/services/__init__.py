from .chat_service import ChatService, guest_id_for, split_guest_header
from .message_templates import MessageTemplate, RequestDecisionMessage, GuestMessage

__all__ = [
    'ChatService', 'guest_id_for', 'split_guest_header',
    'MessageTemplate', 'RequestDecisionMessage', 'GuestMessage'
]
