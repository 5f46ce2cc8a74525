from modules.directory.models import UserRole

ROLE_PERMISSIONS = {
    UserRole.COMMON: ["create_signature"],
    UserRole.SUPPORT: ["adjudicate", "manage", "export"],
    UserRole.ADMIN: ["create_signature", "adjudicate", "manage", "export"],
}

def can_perform_action(user_role: UserRole, action: str) -> bool:
    return action in ROLE_PERMISSIONS.get(user_role, [])
