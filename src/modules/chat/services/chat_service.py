import logging
import re
from typing import Dict, List, Optional, Tuple

from errors import ForbiddenError, NotFoundError, ValidationError
from modules.chat.models import ChatMessage, GUEST_PREFIX
from modules.chat.repositories import ChatRepository
from modules.chat.schemas import ChatMessageResponse, ConversationSummary, Participant
from modules.chat.services.message_templates import GuestMessage, MessageTemplate
from modules.directory.models import User, UserRole, PRIVILEGED_ROLES

logger = logging.getLogger(__name__)

GUEST_HEADER = re.compile(r"^\[GUEST: (.+?) \(@([^)]+)\)\]\s*")

def guest_id_for(username: str) -> str:
    return f"{GUEST_PREFIX}{username.strip().lower()}"

def is_guest_id(participant_id: str) -> bool:
    return participant_id.startswith(GUEST_PREFIX)

def split_guest_header(text: str) -> Tuple[Optional[Tuple[str, str]], str]:
    """Returns ((name, username) or None, text without the guest header)"""
    match = GUEST_HEADER.match(text)
    if not match:
        return None, text
    return (match.group(1).strip(), match.group(2).strip()), text[match.end():]

def guest_participant(guest_id: str, text: str = "") -> Participant:
    info, _ = split_guest_header(text)
    if info:
        name, username = info
    else:
        name, username = "Visitante", guest_id[len(GUEST_PREFIX):]
    return Participant(id=guest_id, name=name, username=username, role="GUEST", is_guest=True, sector_name="Visitante")

def user_participant(user: User) -> Participant:
    return Participant(
        id=str(user.id),
        name=user.name,
        username=user.username,
        role=user.role.value,
        sector_name=user.sector.name if user.sector else None,
    )

class ChatService:
    def __init__(self, repository: ChatRepository):
        self.chat_repository = repository
        self.db = repository.db

    def send_system_message(self, from_user_id: str, to_user_id: str, text: str) -> ChatMessage:
        template = MessageTemplate(str(from_user_id), str(to_user_id), text)
        return self._store(template)

    def send_template(self, template: MessageTemplate) -> ChatMessage:
        return self._store(template)

    def send(self, actor: User, to_user_id: str, text: str) -> ChatMessage:
        to_user_id = (to_user_id or "").strip()
        text = (text or "").strip()
        if not to_user_id or not text:
            raise ValidationError("Destinatário e mensagem são obrigatórios")
        if not is_guest_id(to_user_id) and self._find_user(to_user_id) is None:
            raise NotFoundError("Destinatário não encontrado")
        return self.send_system_message(str(actor.id), to_user_id, text)

    def conversation(self, actor: User, with_user_id: str) -> List[ChatMessageResponse]:
        me = str(actor.id)
        messages = self.chat_repository.find_between(me, with_user_id)
        self.chat_repository.mark_read(with_user_id, me)
        return [self.to_response(m) for m in messages]

    def conversations(self, actor: User) -> List[ConversationSummary]:
        me = str(actor.id)
        summaries: Dict[str, dict] = {}
        for msg in self.chat_repository.find_involving(me):
            other = msg.to_user_id if msg.from_user_id == me else msg.from_user_id
            entry = summaries.setdefault(other, {"unread": 0, "guest_text": ""})
            _, clean_text = split_guest_header(msg.message)
            entry["last"] = clean_text
            entry["last_at"] = msg.created_at
            if msg.to_user_id == me and not msg.is_read:
                entry["unread"] += 1
            if msg.from_guest and not entry["guest_text"]:
                entry["guest_text"] = msg.message

        result = []
        for other, entry in summaries.items():
            participant = self.resolve_participant(other, entry["guest_text"])
            if participant is None:
                continue
            result.append(ConversationSummary(
                user=participant,
                last_message=entry["last"],
                last_message_at=entry["last_at"],
                unread_count=entry["unread"],
            ))
        result.sort(key=lambda c: c.last_message_at, reverse=True)
        return result

    def chat_users(self, actor: User, search: Optional[str] = None) -> List[Participant]:
        query = self.db.query(User).filter(User.id != actor.id)
        if actor.role == UserRole.COMMON:
            query = query.filter(User.role.in_(PRIVILEGED_ROLES))
        users = query.order_by(User.name.asc()).limit(50).all()

        guests = []
        if actor.is_privileged:
            seen = set()
            for msg in self.chat_repository.find_guest_senders(str(actor.id)):
                if msg.from_user_id in seen:
                    continue
                seen.add(msg.from_user_id)
                guests.append(guest_participant(msg.from_user_id, msg.message))

        # privileged roles listed first
        users.sort(key=lambda u: (not u.is_privileged, u.name.lower()))
        participants = guests + [user_participant(u) for u in users]
        if search:
            term = search.lower()
            participants = [p for p in participants if term in p.name.lower() or term in p.username.lower()]
        return participants

    def delete_message(self, actor: User, message_id: int):
        message = self.chat_repository.get(message_id)
        if not message:
            raise NotFoundError("Mensagem não encontrada")
        if message.from_user_id != str(actor.id) and not actor.is_privileged:
            raise ForbiddenError("Sem permissão para deletar esta mensagem")
        self.chat_repository.delete(message)

    def guest_send(self, username: str, name: str, text: str) -> Tuple[ChatMessage, str, User]:
        username = (username or "").strip()
        name = (name or "").strip()
        text = (text or "").strip()
        if not username or not name or not text:
            raise ValidationError("Username, nome e mensagem são obrigatórios")

        support_user = (
            self.db.query(User)
            .filter(User.role.in_(PRIVILEGED_ROLES))
            .order_by(User.created_at.asc(), User.id.asc())
            .first()
        )
        if not support_user:
            raise NotFoundError("Nenhum administrador ou suporte disponível")

        guest_id = guest_id_for(username)
        message = self._store(GuestMessage(guest_id, str(support_user.id), name, username, text))
        logger.info("Guest %s wrote to %s", guest_id, support_user.username)
        return message, guest_id, support_user

    def guest_messages(self, username: str) -> List[ChatMessageResponse]:
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username é obrigatório")
        return [self.to_response(m) for m in self.chat_repository.find_involving(guest_id_for(username))]

    def resolve_participant(self, participant_id: str, text: str = "") -> Optional[Participant]:
        if is_guest_id(participant_id):
            return guest_participant(participant_id, text)
        user = self._find_user(participant_id)
        return user_participant(user) if user else None

    def to_response(self, message: ChatMessage) -> ChatMessageResponse:
        _, clean_text = split_guest_header(message.message)
        return ChatMessageResponse(
            id=message.id,
            from_user_id=message.from_user_id,
            to_user_id=message.to_user_id,
            message=clean_text,
            is_read=message.is_read,
            created_at=message.created_at,
            from_user=self.resolve_participant(message.from_user_id, message.message),
            to_user=self.resolve_participant(message.to_user_id),
        )

    def _find_user(self, participant_id: str) -> Optional[User]:
        try:
            return self.db.get(User, int(participant_id))
        except (TypeError, ValueError):
            return None

    def _store(self, template: MessageTemplate) -> ChatMessage:
        message = ChatMessage(
            from_user_id=template.from_user_id,
            to_user_id=template.to_user_id,
            message=template.message,
        )
        return self.chat_repository.save(message)
