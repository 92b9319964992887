from saaspe.api.auth import AuthApi, AuthResponse, User
from saaspe.api.clients import (
    Client,
    ClientsApi,
    CreateClient,
    PaginatedClients,
    UpdateClient,
)
from saaspe.api.health import HealthApi

__all__ = [
    "AuthApi",
    "AuthResponse",
    "User",
    "Client",
    "ClientsApi",
    "CreateClient",
    "PaginatedClients",
    "UpdateClient",
    "HealthApi",
]
