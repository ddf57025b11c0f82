import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from matterdesk.api_paths import API_PATHS
from matterdesk.auth.schemas import AdminTokenReset, PasswordChange, UserCreate, UserProfile
from matterdesk.exceptions import ValidationError
from matterdesk.helpers import validate_email
from matterdesk.services.base import BaseService
from matterdesk.session import UserSession

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    def __init__(self, session: UserSession):
        super().__init__(session.client)
        self.session = session

    def login(self, email: str, password: str, remember_me: bool = True) -> UserProfile:
        """Authenticate and store the returned token; ``remember_me`` picks the persistent store."""
        if not email or not email.strip():
            raise ValidationError("Please enter an email address.")
        if not validate_email(email):
            raise ValidationError("Please enter a valid email address.")
        if not password or not password.strip():
            raise ValidationError("Please enter a password.")

        data = self.client.post(API_PATHS.AUTH.LOGIN, json={"email": email, "password": password})
        if not isinstance(data, dict) or not data.get("token"):
            raise ValidationError("Something went wrong. Please try again.")

        user = self.session.update_user(data, remember_me)
        logger.info(f"Logged in as {user.email} ({user.role})")
        return user

    def register(self, payload: UserCreate, remember_me: bool = True) -> UserProfile:
        data = self.client.post(API_PATHS.AUTH.REGISTER, json=payload.to_api())
        return self.session.update_user(data, remember_me)

    def get_profile(self) -> UserProfile:
        return UserProfile.model_validate(self.client.get(API_PATHS.AUTH.GET_PROFILE))

    def update_profile(self, updates: Dict[str, Any]) -> UserProfile:
        data = self.client.put(API_PATHS.AUTH.UPDATE_PROFILE, json=updates) or {}
        data = {key: value for key, value in data.items() if key != "message"}
        if not data.get("token"):
            data.pop("token", None)
        current = self.session.user.model_dump(by_alias=True) if self.session.user else {}
        return self.session.update_user({**current, **data})

    def upload_image(self, image_path: Union[str, Path]) -> Dict[str, Any]:
        image_path = Path(image_path)
        with open(image_path, "rb") as f:
            return self.client.post(API_PATHS.AUTH.UPLOAD_IMAGE, files={"image": (image_path.name, f)})

    def reset_password_with_admin_token(
        self,
        email: str,
        admin_invite_token: str,
        new_password: str,
        confirm_password: str,
    ) -> Dict[str, Any]:
        trimmed_email = (email or "").strip()
        trimmed_token = (admin_invite_token or "").strip()

        if not trimmed_email:
            raise ValidationError("Please enter the email address associated with your account.")
        if not validate_email(trimmed_email):
            raise ValidationError("Please enter a valid email address.")
        if not trimmed_token:
            raise ValidationError("Please enter the admin invite token provided by your administrator.")
        if not (new_password or "").strip():
            raise ValidationError("Please provide a new password.")
        if new_password != confirm_password:
            raise ValidationError("New password and confirm password do not match.")

        payload = AdminTokenReset(email=trimmed_email, new_password=new_password, admin_invite_token=trimmed_token)
        return self.client.post(API_PATHS.AUTH.RESET_WITH_ADMIN_TOKEN, json=payload.to_api())

    def change_password(self, current_password: str, new_password: str, confirm_password: str) -> UserProfile:
        """Forced password change after the first login; the current token is kept."""
        if not current_password or not new_password or not confirm_password:
            raise ValidationError("Please complete all fields.")
        if new_password != confirm_password:
            raise ValidationError("New password and confirm password do not match.")

        payload = PasswordChange(current_password=current_password, new_password=new_password)
        self.client.put(API_PATHS.PROFILE.CHANGE_PASSWORD, json=payload.to_api())

        profile = self.client.get(API_PATHS.AUTH.GET_PROFILE)
        token: Optional[str] = self.session.token_storage.get_token()
        return self.session.update_user({**profile, "token": token})

    def logout(self):
        self.session.clear_user()
