"""
Inventory assistant.

Answers free-text questions about the current inventory by relaying them to
an OpenRouter chat model together with a snapshot of the database. The
relay never raises: missing credentials, HTTP errors and network failures
all come back as a fixed message the UI can show as-is.
"""
import json
import logging
from typing import Optional, Dict, Any

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from kitflow.config import settings
from kitflow.models.inventory import InventoryCategoryType
from kitflow.services.assignment_service import AssignmentService
from kitflow.services.client_service import ClientService
from kitflow.services.contact_service import VendorService, ServiceProviderService
from kitflow.services.inventory_service import InventoryService
from kitflow.services.kit_service import KitService
from kitflow.services.laser_file_service import LaserFileService
from kitflow.services.report_service import ReportService


logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "AI is not configured yet. Please add your OpenRouter API key."
ERROR_MESSAGE = "Sorry, there was an error generating a response. Please try again."
EMPTY_MESSAGE = "No response."

KIT_LIMIT = 50
RECORD_LIMIT = 30


class InventoryChatService:
    """Chat relay grounded on a live database snapshot."""

    def __init__(
        self,
        db: AsyncSession,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.db = db
        self.api_key = settings.OPENROUTER_API_KEY if api_key is None else api_key
        self.transport = transport

    async def build_context(self) -> Dict[str, Any]:
        """Brief slices of each collection for the system prompt."""
        summary = await ReportService(self.db).inventory_summary()
        kits = await KitService(self.db).list_kits(limit=KIT_LIMIT)
        clients = (await ClientService(self.db).list_clients())[:RECORD_LIMIT]
        assignments = await AssignmentService(self.db).list_with_details(limit=RECORD_LIMIT)
        vendors = (await VendorService(self.db).list_vendors())[:RECORD_LIMIT]
        services = (await ServiceProviderService(self.db).list_services())[:RECORD_LIMIT]
        raw_materials = (
            await InventoryService(self.db).list_items(InventoryCategoryType.RAW_MATERIAL)
        )[:RECORD_LIMIT]
        laser_files = (await LaserFileService(self.db).list_files())[:KIT_LIMIT]

        return {
            "summary": summary.model_dump(),
            "kits": [
                {
                    "name": k.name,
                    "type": k.type,
                    "stock": k.stock_count,
                    "status": k.status,
                    "remarks": k.remarks,
                    "serial_number": k.serial_number,
                }
                for k in kits
            ],
            "clients": [
                {"name": c.name, "organization": c.organization, "type": c.type, "notes": c.notes}
                for c in clients
            ],
            "assignments": [
                {
                    "kit_name": row["kit"].name if row["kit"] else None,
                    "client_name": row["client"].name if row["client"] else None,
                    "quantity": row["assignment"].quantity,
                    "status": row["assignment"].status,
                    "notes": row["assignment"].notes,
                }
                for row in assignments
            ],
            "vendors": [
                {
                    "name": v.name,
                    "organization": v.organization,
                    "material_type": v.material_type,
                    "notes": v.notes,
                }
                for v in vendors
            ],
            "services": [
                {"name": s.name, "service_type": s.service_type, "contact": s.contact, "notes": s.notes}
                for s in services
            ],
            "inventory": [
                {
                    "name": i.name,
                    "category": i.category,
                    "sub_category": i.sub_category,
                    "quantity": i.quantity,
                    "notes": i.notes,
                }
                for i in raw_materials
            ],
            "laser_files": [
                {
                    "file_name": f.file_name,
                    "kit_id": str(f.kit_id),
                    "uploaded_at": f.uploaded_at.isoformat(),
                }
                for f in laser_files
            ],
        }

    def build_system_prompt(self, context: Dict[str, Any]) -> str:
        def dump(value) -> str:
            return json.dumps(value, indent=2, default=str)

        return (
            f"You are the {settings.APP_NAME} AI Manager for a minimalist inventory system.\n"
            "Answer concisely and helpfully. Use the provided database context to inform your answers.\n\n"
            f"Database Summary:\n{dump(context['summary'])}\n\n"
            f"Kits (first {KIT_LIMIT}, includes remarks and serial numbers):\n{dump(context['kits'])}\n\n"
            f"Clients (first {RECORD_LIMIT}, includes notes):\n{dump(context['clients'])}\n\n"
            f"Assignments (first {RECORD_LIMIT}, includes notes):\n{dump(context['assignments'])}\n\n"
            f"Vendors (first {RECORD_LIMIT}, includes notes and material types):\n{dump(context['vendors'])}\n\n"
            f"Services (first {RECORD_LIMIT}, includes service types and notes):\n{dump(context['services'])}\n\n"
            f"Inventory Items (first {RECORD_LIMIT}, includes notes):\n{dump(context['inventory'])}\n\n"
            f"Laser Files (first {KIT_LIMIT}):\n{dump(context['laser_files'])}\n\n"
            "If asked for unavailable details, say you don't have that info yet."
        )

    async def chat(self, message: str) -> str:
        """Answer ``message``. Always returns text."""
        if not self.api_key:
            logger.error("Missing OPENROUTER_API_KEY")
            return NOT_CONFIGURED_MESSAGE

        system_prompt = self.build_system_prompt(await self.build_context())
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": settings.APP_NAME,
        }
        payload = {
            "model": settings.OPENROUTER_MODEL,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": message},
            ],
            "max_tokens": settings.AI_MAX_TOKENS,
        }

        try:
            async with httpx.AsyncClient(
                transport=self.transport,
                timeout=settings.AI_TIMEOUT_SECONDS
            ) as client:
                response = await client.post(
                    settings.OPENROUTER_API_URL,
                    json=payload,
                    headers=headers
                )

            if response.status_code >= 300:
                logger.error(f"OpenRouter error: {response.status_code} {response.text}")
                return ERROR_MESSAGE

            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"AI chat error: {e}")
            return ERROR_MESSAGE

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        return content or EMPTY_MESSAGE
