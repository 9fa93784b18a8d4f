from abc import ABC, abstractmethod
from typing import Optional


class IIdentityService(ABC):
    """Identity/permission lookup - resolves the role held by a user"""

    @abstractmethod
    async def get_role(self, user_id: str) -> Optional[str]:
        """Role of the user, or None when the user is unknown"""
        pass
