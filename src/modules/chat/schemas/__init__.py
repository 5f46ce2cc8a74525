from .chat_schemas import (
    Participant, ChatMessageResponse, ConversationSummary, SendMessageRequest, GuestMessageRequest
)

__all__ = [
    'Participant', 'ChatMessageResponse', 'ConversationSummary', 'SendMessageRequest', 'GuestMessageRequest'
]
