import logging
from typing import Any, Dict, Optional, Union

import pydantic
import requests

from matterdesk.api_paths import API_PATHS
from matterdesk.auth.schemas import UserProfile
from matterdesk.exceptions import MatterDeskError
from matterdesk.http_client import ApiClient
from matterdesk.roles import RouteAccess, normalize_role, resolve_route_access

logger = logging.getLogger(__name__)


def with_normalized_role(user_data):
    if not isinstance(user_data, dict):
        return user_data
    return {**user_data, "role": normalize_role(user_data.get("role"))}


class UserSession:
    """
    The signed-in user for the lifetime of the process.

    ``loading`` stays True until ``initialize`` has resolved the stored token
    (or there was none), mirroring what a route guard has to wait for.
    """

    def __init__(self, client: ApiClient):
        self.client = client
        self.token_storage = client.token_storage
        self.user: Optional[UserProfile] = None
        self.loading = True

    def initialize(self) -> Optional[UserProfile]:
        if not self.token_storage.get_token():
            self.loading = False
            return None

        try:
            profile = self.client.get(API_PATHS.AUTH.GET_PROFILE)
            self.user = UserProfile.model_validate(with_normalized_role(profile))
        except (MatterDeskError, requests.exceptions.RequestException, pydantic.ValidationError) as e:
            logger.error(f"User not authenticated: {e}")
            self.token_storage.clear_token()
        finally:
            self.loading = False

        return self.user

    def update_user(self, user_data: Union[Dict[str, Any], UserProfile], remember_me: Optional[bool] = None) -> UserProfile:
        if isinstance(user_data, UserProfile):
            user_data = user_data.model_dump(by_alias=True)

        self.user = UserProfile.model_validate(with_normalized_role(user_data))
        if self.user.token:
            self.token_storage.set_token(self.user.token, remember_me)
        self.loading = False
        return self.user

    def clear_user(self):
        self.user = None
        self.token_storage.clear_token()

    def route_access(self, allowed_roles=None) -> RouteAccess:
        return resolve_route_access(self.user, allowed_roles, self.loading)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None
