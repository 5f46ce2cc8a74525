class MessageTemplate:
    def __init__(self, from_user_id: str, to_user_id: str, message: str):
        self.from_user_id = from_user_id
        self.to_user_id = to_user_id
        self.message = message

    def to_dict(self):
        return {
            'from_user_id': self.from_user_id,
            'to_user_id': self.to_user_id,
            'message': self.message
        }

class RequestDecisionMessage(MessageTemplate):
    def __init__(
        self,
        from_user_id: str,
        to_user_id: str,
        request_type: str,
        approved: bool,
        incremental_id=None,
        admin_response: str = None,
    ):
        readable_types = {
            'EDIT': 'edição',
            'DELETE': 'exclusão'
        }
        type_human = readable_types.get(request_type, request_type)
        sig_id = incremental_id if incremental_id is not None else 'N/A'
        if approved:
            message = f"Sua solicitação de {type_human} da assinatura {sig_id} foi APROVADA."
            if admin_response:
                message += f" Comentário: {admin_response}"
        else:
            message = f"Sua solicitação de {type_human} da assinatura {sig_id} foi REJEITADA."
            if admin_response:
                message += f" Motivo: {admin_response}"
        super().__init__(from_user_id, to_user_id, message)

class GuestMessage(MessageTemplate):
    def __init__(self, guest_id: str, to_user_id: str, name: str, username: str, text: str):
        super().__init__(guest_id, to_user_id, f"[GUEST: {name} (@{username})] {text}")
