from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from modules.auth.dependencies import get_current_user
from modules.chat.repositories import ChatRepository
from modules.chat.services import ChatService
from modules.directory.models import User
from modules.notifications.repositories.notification_repository import NotificationRepository
from modules.notifications.services.notification_service import NotificationService

router = APIRouter()


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    repo = NotificationRepository(db)
    return NotificationService(repo, ChatService(ChatRepository(db)))


@router.get("", summary="Listar notificações do usuário")
def list_notifications(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    return {"success": True, "data": {"notifications": service.get_notifications(current_user)}}


@router.get("/count", summary="Contagem de notificações não lidas")
def count_notifications(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    return {"success": True, "data": service.count(current_user)}


@router.put("/read-all", summary="Marcar todas as mensagens como lidas")
def mark_all_notifications_as_read(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    updated = service.mark_all_as_read(current_user)
    return {"success": True, "data": {"updated": updated}, "message": "Notificações marcadas como lidas"}


@router.put("/{notification_id}/read", summary="Marcar notificação como lida")
def mark_notification_as_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    notif = service.mark_as_read(current_user, notification_id)
    return {"success": True, "data": {"notification": notif}, "message": "Notificação marcada como lida"}


@router.delete("/{notification_id}", summary="Remover notificação")
def delete_notification(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    service.delete(current_user, notification_id)
    return {"success": True, "message": "Notificação removida"}
