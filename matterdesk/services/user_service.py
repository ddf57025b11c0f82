from pathlib import Path
from typing import Any, Dict, List, Union

from matterdesk.api_paths import API_PATHS
from matterdesk.exceptions import ValidationError
from matterdesk.roles import UserRole, matches_role
from matterdesk.services.base import BaseService
from matterdesk.users.schemas import TeamMember, UserPayload


class UserService(BaseService):
    def list_users(self, include_clients: bool = True) -> List[TeamMember]:
        """Team directory (admin only), sorted by name."""
        data = self.client.get(API_PATHS.USERS.GET_ALL)
        users = [TeamMember.model_validate(item) for item in (data if isinstance(data, list) else [])]
        if not include_clients:
            users = [user for user in users if not matches_role(user.role, UserRole.CLIENT)]
        return sorted(users, key=lambda user: (user.name or "").lower())

    def get_user(self, user_id: str) -> TeamMember:
        return TeamMember.model_validate(self.client.get(API_PATHS.USERS.by_id(user_id)))

    def create_user(self, payload: UserPayload) -> Dict[str, Any]:
        return self.client.post(API_PATHS.USERS.CREATE, json=payload.to_api())

    def update_user(self, user_id: str, payload: UserPayload) -> Dict[str, Any]:
        return self.client.put(API_PATHS.USERS.by_id(user_id), json=payload.to_api())

    def delete_user(self, user_id: str) -> Dict[str, Any]:
        return self.client.delete(API_PATHS.USERS.by_id(user_id))

    def reset_user_password(self, user_id: str, new_password: str) -> Dict[str, Any]:
        if not (new_password or "").strip():
            raise ValidationError("Please provide a new password.")
        return self.client.put(API_PATHS.USERS.reset_password(user_id), json={"newPassword": new_password})

    def update_profile_photo(self, image_path: Union[str, Path]) -> str:
        image_path = Path(image_path)
        with open(image_path, "rb") as f:
            data = self.client.put(API_PATHS.PROFILE.PHOTO, files={"profileImage": (image_path.name, f)})
        return (data or {}).get("profileImageUrl") or ""

    def delete_profile_photo(self) -> Dict[str, Any]:
        return self.client.delete(API_PATHS.PROFILE.PHOTO)

    def change_password(self, current_password: str, new_password: str, confirm_password: str) -> Dict[str, Any]:
        if not current_password or not new_password or not confirm_password:
            raise ValidationError("Please complete all fields.")
        if new_password != confirm_password:
            raise ValidationError("New password and confirm password do not match.")
        return self.client.put(
            API_PATHS.PROFILE.CHANGE_PASSWORD,
            json={"currentPassword": current_password, "newPassword": new_password},
        )
