"""
Agency client (customer) endpoints.
"""

from typing import Literal

from pydantic import Field

from saaspe.api.base import ApiModel, BaseEndpoint

ClientStatus = Literal["prospect", "qualified", "proposal", "negotiation", "won", "lost"]


class ClientSummaryItem(ApiModel):
    """Transcription or proposal attached to a client."""

    id: str
    status: str
    created: str
    file_name: str | None = None
    title: str | None = None


class ClientBase(ApiModel):
    industry: str | None = None
    website: str | None = None
    contact_first_name: str | None = None
    contact_last_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    contact_linked_in: str | None = Field(default=None, alias="contactLinkedIn")
    problem_statement: str | None = None
    current_tools: list[str] | None = None
    budget: str | None = None
    timeline: str | None = None
    hubspot_deal_id: str | None = None


class Client(ClientBase):
    id: str
    company_name: str
    status: ClientStatus
    created: str
    updated: str
    transcriptions: list[ClientSummaryItem] | None = None
    proposals: list[ClientSummaryItem] | None = None


class CreateClient(ClientBase):
    company_name: str
    status: ClientStatus | None = None


class UpdateClient(ClientBase):
    company_name: str | None = None
    status: ClientStatus | None = None


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int


class PaginatedClients(ApiModel):
    data: list[Client]
    pagination: Pagination


class ClientsApi(BaseEndpoint):
    """CRUD over /api/v1/clients."""

    BASE_PATH = "/api/v1/clients"

    async def get_all(
        self,
        page: int = 1,
        limit: int = 20,
        status: ClientStatus | None = None,
    ) -> PaginatedClients:
        """
        Get clients one page at a time.

        Args:
            page: 1-based page number
            limit: Page size
            status: Only return clients in this pipeline stage
        """
        params: dict[str, str] = {"page": str(page), "limit": str(limit)}
        if status:
            params["status"] = status

        result = await self.client.get(self.BASE_PATH, params=params)
        return PaginatedClients.model_validate(result.data)

    async def get_one(self, client_id: str) -> Client:
        result = await self.client.get(f"{self.BASE_PATH}/{client_id}")
        return Client.model_validate(result.data)

    async def create(self, data: CreateClient) -> Client:
        result = await self.client.post(
            self.BASE_PATH,
            json_data=data.model_dump(by_alias=True, exclude_none=True),
        )
        return Client.model_validate(result.data)

    async def update(self, client_id: str, data: UpdateClient) -> Client:
        """Patch only the fields that were set on ``data``."""
        result = await self.client.patch(
            f"{self.BASE_PATH}/{client_id}",
            json_data=data.model_dump(by_alias=True, exclude_unset=True),
        )
        return Client.model_validate(result.data)

    async def delete(self, client_id: str) -> None:
        await self.client.delete(f"{self.BASE_PATH}/{client_id}")
