import logging
from typing import Any, Optional

import httpx

from ...config import AUTH_ADMIN_TIMEOUT, AUTH_PROVIDER_URL, AUTH_SERVICE_ROLE_KEY

logger = logging.getLogger(__name__)


class UserAdminError(Exception):
    """A user-management call that must answer {"error": message}"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthAdminClient:
    """Client for the hosted auth provider's admin user API (service-role key)"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        service_key: Optional[str] = None,
        timeout: float = AUTH_ADMIN_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else AUTH_PROVIDER_URL).rstrip("/")
        self.service_key = service_key if service_key is not None else AUTH_SERVICE_ROLE_KEY
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        if not self.base_url or not self.service_key:
            logger.error("❌ AUTH_PROVIDER_URL / AUTH_SERVICE_ROLE_KEY not configured")
            raise UserAdminError("Provedor de autenticação não configurado", status_code=500)
        return httpx.AsyncClient(
            base_url=f"{self.base_url}/auth/v1/admin",
            headers={
                "apikey": self.service_key,
                "Authorization": f"Bearer {self.service_key}",
            },
            timeout=self.timeout,
            transport=self.transport,
        )

    @staticmethod
    def _raise_for_error(response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        try:
            body = response.json()
        except ValueError:
            body = None
        message = None
        if isinstance(body, dict):
            message = (
                body.get("msg") or body.get("message") or body.get("error_description") or body.get("error")
            )
        logger.error(f"❌ Auth provider {action} failed: HTTP {response.status_code} {message or response.text[:200]}")
        raise UserAdminError(message or f"Falha ao {action} usuário", status_code=400)

    async def create_user(self, email: str, password: str, full_name: Optional[str]) -> dict[str, Any]:
        """Create a confirmed identity; returns the provider's user object"""
        async with self._client() as client:
            response = await client.post(
                "/users",
                json={
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": {"full_name": full_name},
                },
            )
        self._raise_for_error(response, "criar")
        return response.json()

    async def update_user(self, user_id: str, **attributes) -> dict[str, Any]:
        """Update email and/or password"""
        async with self._client() as client:
            response = await client.put(f"/users/{user_id}", json=attributes)
        self._raise_for_error(response, "atualizar")
        return response.json()

    async def delete_user(self, user_id: str) -> None:
        async with self._client() as client:
            response = await client.delete(f"/users/{user_id}")
        self._raise_for_error(response, "excluir")
