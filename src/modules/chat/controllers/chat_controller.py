from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db
from modules.auth.dependencies import get_current_user
from modules.chat.repositories import ChatRepository
from modules.chat.schemas import GuestMessageRequest, SendMessageRequest
from modules.chat.services import ChatService
from modules.chat.services.chat_service import user_participant
from modules.directory.models import User

router = APIRouter(prefix="/chat", tags=["chat"])


def get_chat_service(db: Session = Depends(get_db)) -> ChatService:
    repo = ChatRepository(db)
    return ChatService(repo)


@router.get("", summary="Conversas do usuário ou mensagens com um participante")
def list_chat(
    with_user_id: Optional[str] = Query(None, alias="withUserId"),
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    if with_user_id:
        return {"success": True, "data": {"messages": service.conversation(current_user, with_user_id)}}
    return {"success": True, "data": {"conversations": service.conversations(current_user)}}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Enviar mensagem")
def send_message(
    payload: SendMessageRequest,
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    message = service.send(current_user, payload.to_user_id, payload.message)
    return {"success": True, "data": {"message": service.to_response(message)}, "message": "Mensagem enviada com sucesso"}


@router.get("/users", summary="Usuários disponíveis para chat")
def list_chat_users(
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    return {"success": True, "data": {"users": service.chat_users(current_user, search)}}


@router.post("/guest", summary="Mensagem de visitante para o suporte")
def guest_send(payload: GuestMessageRequest, service: ChatService = Depends(get_chat_service)):
    message, guest_id, support_user = service.guest_send(payload.username, payload.name, payload.message)
    return {
        "success": True,
        "data": {
            "message": service.to_response(message),
            "guest_id": guest_id,
            "support_user": user_participant(support_user),
        },
        "message": "Mensagem enviada com sucesso",
    }


@router.get("/guest", summary="Mensagens de um visitante")
def guest_messages(username: str = Query(""), service: ChatService = Depends(get_chat_service)):
    return {"success": True, "data": {"messages": service.guest_messages(username)}}


@router.delete("/{message_id}", summary="Deletar mensagem")
def delete_message(
    message_id: int,
    current_user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    service.delete_message(current_user, message_id)
    return {"success": True, "message": "Mensagem deletada com sucesso"}
