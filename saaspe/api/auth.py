"""
Authentication endpoints.

Tokens are issued as httpOnly cookies; the client's cookie jar carries them
on every subsequent request.
"""

from saaspe.api.base import ApiModel, BaseEndpoint


class AuthTokens(ApiModel):
    access_token: str
    refresh_token: str


class User(ApiModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    tenant_id: str


class Tenant(ApiModel):
    id: str
    name: str
    plan: str
    status: str


class AuthResponse(ApiModel):
    tokens: AuthTokens
    user: User
    tenant: Tenant | None = None


class AuthApi(BaseEndpoint):
    """Login, registration and session endpoints."""

    async def login(self, email: str, password: str) -> AuthResponse:
        result = await self.client.post(
            "/api/v1/auth/login",
            json_data={"email": email, "password": password},
        )
        return AuthResponse.model_validate(result.data)

    async def register(
        self,
        tenant_name: str,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> AuthResponse:
        """Register a new agency account."""
        # The backend names the tenant "agency"
        payload = {
            "agencyName": tenant_name,
            "email": email,
            "password": password,
            "firstName": first_name,
            "lastName": last_name,
        }
        result = await self.client.post("/api/v1/auth/register", json_data=payload)
        return AuthResponse.model_validate(result.data)

    async def logout(self) -> None:
        """Invalidate the session server-side and drop local cookies."""
        try:
            await self.client.post("/api/v1/auth/logout")
        finally:
            await self.client.clear_session()

    async def get_me(self) -> User:
        result = await self.client.get("/api/v1/users/me")
        return User.model_validate(result.data)
