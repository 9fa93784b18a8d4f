from typing import Mapping, Optional

from src.app.services.identity_service import IIdentityService


class ConfigIdentityService(IIdentityService):
    """Identity lookup backed by the static USER_ROLES configuration mapping"""

    def __init__(self, user_roles: Mapping[str, str]):
        self.user_roles = {str(user_id): role for user_id, role in user_roles.items()}

    async def get_role(self, user_id: str) -> Optional[str]:
        return self.user_roles.get(str(user_id))
