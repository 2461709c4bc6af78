import logging
import uuid
from typing import Optional, List

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from kitflow.core.exceptions import NotFound
from kitflow.models.client import Client, ClientType
from kitflow.schemas.client import ClientCreate, ClientUpdate


logger = logging.getLogger(__name__)


class ClientService:
    """Service for client records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_client(
        self,
        data: ClientCreate,
        user_id: Optional[uuid.UUID] = None
    ) -> Client:
        client = Client(
            **data.model_dump(mode="json"),
            created_by=user_id,
        )
        self.db.add(client)
        await self.db.commit()
        await self.db.refresh(client)
        logger.info(f"Client created: {client.name} ({client.organization})")
        return client

    async def get_client(self, client_id: uuid.UUID) -> Optional[Client]:
        result = await self.db.execute(select(Client).where(Client.id == client_id))
        return result.scalar_one_or_none()

    async def get_client_or_404(self, client_id: uuid.UUID) -> Client:
        client = await self.get_client(client_id)
        if not client:
            raise NotFound("Client not found")
        return client

    async def list_clients(
        self,
        client_type: Optional[ClientType] = None,
        search: Optional[str] = None,
    ) -> List[Client]:
        """List clients by name, optionally filtered by type or search text."""
        query = select(Client)
        if client_type:
            query = query.where(Client.type == client_type.value)
        if search:
            query = query.where(
                or_(
                    Client.name.ilike(f"%{search}%"),
                    Client.organization.ilike(f"%{search}%"),
                )
            )
        result = await self.db.execute(query.order_by(Client.name))
        return list(result.scalars().all())

    async def update_client(self, client_id: uuid.UUID, data: ClientUpdate) -> Client:
        client = await self.get_client_or_404(client_id)
        for field, value in data.model_dump(mode="json", exclude_unset=True).items():
            setattr(client, field, value)
        await self.db.commit()
        await self.db.refresh(client)
        return client

    async def delete_client(self, client_id: uuid.UUID) -> None:
        """Delete a client. Its assignments stay and show up without a client."""
        client = await self.get_client_or_404(client_id)
        await self.db.delete(client)
        await self.db.commit()
        logger.info(f"Client deleted: {client_id}")
