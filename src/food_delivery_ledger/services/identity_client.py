"""Client for the backing store's auth API.

The ledger only needs to turn an access token into a caller identity. Sign up,
sign in and sign out are passed straight through to the provider so clients
have a single base URL to talk to.
"""

import logging
from typing import Any

import httpx

from food_delivery_ledger.errors import AuthenticationFailedError, BackendUnavailableError
from food_delivery_ledger.models.identity_models import AuthSession, CallerIdentity

logger = logging.getLogger(__name__)


def _provider_message(response: httpx.Response) -> str:
    """Pull the human readable error out of an auth provider response."""
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(data, dict):
        for key in ("error_description", "msg", "message", "error"):
            if data.get(key):
                return str(data[key])
    return f"HTTP {response.status_code}"


def _identity_from_user(data: dict[str, Any]) -> CallerIdentity:
    return CallerIdentity(user_id=data["id"], email=data.get("email"))


class IdentityClient:
    """HTTP client for GoTrue-compatible ``/auth/v1`` endpoints.

    Every request carries the project API key in the ``apikey`` header and is
    bounded by ``timeout_seconds``.
    """

    def __init__(self, base_url: str, api_key: str, timeout_seconds: float = 5.0) -> None:
        """Initialize the identity client.

        Args:
            base_url: Base URL of the auth provider (e.g., "https://project.example.co")
            api_key: Public API key sent with every request
            timeout_seconds: Per-request timeout
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        headers = {"apikey": self.api_key}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    async def get_caller_identity(self, access_token: str) -> CallerIdentity | None:
        """Resolve an access token to the user it was issued to.

        Args:
            access_token: Bearer token from the client

        Returns:
            CallerIdentity for a valid token, None if the provider rejects it

        Raises:
            BackendUnavailableError: If the provider cannot be reached
        """
        url = f"{self.base_url}/auth/v1/user"

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url, headers=self._headers(access_token))
        except httpx.RequestError as e:
            logger.error(f"Auth provider unreachable while resolving identity: {e}")
            raise BackendUnavailableError("Identity provider unavailable") from e

        if response.status_code in (401, 403):
            return None
        if response.status_code >= 500:
            logger.error(f"Auth provider returned {response.status_code} resolving identity")
            raise BackendUnavailableError("Identity provider unavailable")
        if response.status_code >= 400:
            logger.warning(f"Auth provider rejected token lookup: {_provider_message(response)}")
            return None

        return _identity_from_user(response.json())

    async def sign_up(self, email: str, password: str) -> CallerIdentity:
        """Register a new user with the provider.

        Returns:
            The identity of the new user

        Raises:
            AuthenticationFailedError: If the provider rejects the sign up
            BackendUnavailableError: If the provider cannot be reached
        """
        data = await self._post("/auth/v1/signup", {"email": email, "password": password})
        user = data.get("user", data)
        return _identity_from_user(user)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Exchange email and password for a session.

        Raises:
            AuthenticationFailedError: If the credentials are rejected
            BackendUnavailableError: If the provider cannot be reached
        """
        data = await self._post(
            "/auth/v1/token",
            {"email": email, "password": password},
            params={"grant_type": "password"},
        )
        return AuthSession(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_in=data.get("expires_in"),
            token_type=data.get("token_type", "bearer"),
            user=_identity_from_user(data["user"]) if data.get("user") else None,
        )

    async def sign_out(self, access_token: str) -> None:
        """Revoke a session.

        Raises:
            AuthenticationFailedError: If the provider rejects the token
            BackendUnavailableError: If the provider cannot be reached
        """
        await self._post("/auth/v1/logout", None, access_token=access_token)

    async def _post(
        self,
        path: str,
        payload: dict[str, Any] | None,
        params: dict[str, str] | None = None,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(
                    url,
                    json=payload,
                    params=params,
                    headers=self._headers(access_token),
                )
        except httpx.RequestError as e:
            logger.error(f"Auth provider unreachable calling {path}: {e}")
            raise BackendUnavailableError("Identity provider unavailable") from e

        if response.status_code >= 500:
            logger.error(f"Auth provider returned {response.status_code} for {path}")
            raise BackendUnavailableError("Identity provider unavailable")
        if response.status_code >= 400:
            raise AuthenticationFailedError(_provider_message(response))

        if response.status_code == 204 or not response.content:
            return {}
        result: dict[str, Any] = response.json()
        return result
