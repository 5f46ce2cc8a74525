import logging
from typing import List, Optional

from errors import ForbiddenError, NotFoundError, ValidationError
from modules.chat.models import ChatMessage
from modules.chat.services import ChatService
from modules.directory.models import User
from modules.notifications.models.schemas import NotificationCount, NotificationResponse
from modules.notifications.repositories.notification_repository import NotificationRepository
from modules.workflow.models import Request, RequestType

logger = logging.getLogger(__name__)

MESSAGE_PREFIX = "message-"
REQUEST_PREFIX = "request-"
FEED_LIMIT = 30
DESCRIPTION_LIMIT = 100

class NotificationTemplate:
    def __init__(self, notification_id: str, kind: str, title: str, description: str):
        self.notification_id = notification_id
        self.kind = kind
        self.title = title
        self.description = description

    def to_dict(self):
        return {
            'id': self.notification_id,
            'type': self.kind,
            'title': self.title,
            'description': self.description
        }

class NewMessageNotification(NotificationTemplate):
    def __init__(self, message: ChatMessage, text: str):
        if len(text) > DESCRIPTION_LIMIT:
            text = text[:DESCRIPTION_LIMIT] + "..."
        super().__init__(f"{MESSAGE_PREFIX}{message.id}", "message", "Nova Mensagem", text)

class PendingRequestNotification(NotificationTemplate):
    def __init__(self, request: Request):
        is_edit = request.type == RequestType.EDIT
        title = f"Nova Solicitação de {'Edição' if is_edit else 'Exclusão'}"
        signature = request.signature
        description = (
            f"Usuário {request.user.name} ({request.user.username}) solicitou "
            f"{'edição' if is_edit else 'exclusão'} da assinatura #{signature.incremental_id} "
            f"\"{signature.reason}\" (Token: {signature.token}). Motivo: {request.reason}"
        )
        super().__init__(f"{REQUEST_PREFIX}{request.id}", "request", title, description)

class NotificationService:
    """
    Derives the notification feed from chat messages addressed to the user
    and, for privileged users, from the PENDING requests. Only message
    notifications carry read/delete state; request notifications are
    rebuilt on every fetch and always unread.
    """

    def __init__(self, repository: NotificationRepository, chat_service: ChatService):
        self.notification_repository = repository
        self.chat_service = chat_service

    def get_notifications(self, user: User) -> List[NotificationResponse]:
        notifications = []
        for message in self.notification_repository.messages.find_by_recipient(str(user.id), FEED_LIMIT):
            notifications.append(self._from_message(message))

        if user.is_privileged:
            for request in self.notification_repository.find_pending_requests(FEED_LIMIT):
                template = PendingRequestNotification(request)
                notifications.append(NotificationResponse(
                    **template.to_dict(),
                    is_read=False,
                    created_at=request.created_at,
                    related_data={
                        "request_id": request.id,
                        "signature_id": request.signature_id,
                        "user_id": request.user_id,
                    },
                ))

        notifications.sort(key=lambda n: n.created_at, reverse=True)
        return notifications

    def count(self, user: User) -> NotificationCount:
        unread_messages = self.notification_repository.messages.count_unread(str(user.id))
        pending = self.notification_repository.count_pending_requests() if user.is_privileged else 0
        return NotificationCount(
            unread_count=unread_messages + pending,
            unread_messages=unread_messages,
            pending_requests=pending,
        )

    def mark_as_read(self, user: User, notification_id: str) -> Optional[NotificationResponse]:
        message = self._owned_message(user, notification_id)
        if message is None:
            return None
        updated = self.notification_repository.messages.update(message.id, {'is_read': True})
        return self._from_message(updated)

    def delete(self, user: User, notification_id: str) -> bool:
        message = self._owned_message(user, notification_id)
        if message is None:
            return False
        self.notification_repository.messages.delete(message)
        return True

    def mark_all_as_read(self, user: User) -> int:
        return self.notification_repository.messages.mark_all_read(str(user.id))

    def _owned_message(self, user: User, notification_id: str) -> Optional[ChatMessage]:
        """Resolves a message notification; request notifications resolve to None"""
        if notification_id.startswith(REQUEST_PREFIX):
            return None
        if not notification_id.startswith(MESSAGE_PREFIX):
            raise ValidationError("Identificador de notificação inválido")
        try:
            message_id = int(notification_id[len(MESSAGE_PREFIX):])
        except ValueError:
            raise ValidationError("Identificador de notificação inválido")

        message = self.notification_repository.messages.get(message_id)
        if not message:
            raise NotFoundError("Notificação não encontrada")
        if message.to_user_id != str(user.id):
            raise ForbiddenError("Sem permissão para alterar esta notificação")
        return message

    def _from_message(self, message: ChatMessage) -> NotificationResponse:
        response = self.chat_service.to_response(message)
        template = NewMessageNotification(message, response.message)
        return NotificationResponse(
            **template.to_dict(),
            is_read=message.is_read,
            created_at=message.created_at,
            related_data={"message_id": message.id, "from_user_id": message.from_user_id},
            from_user=response.from_user,
        )
