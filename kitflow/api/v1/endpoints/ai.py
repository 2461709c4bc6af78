"""
AI assistant endpoint.

The assistant answers from a snapshot of the live database. It never fails
the request: upstream problems come back as an apology message.
"""
from fastapi import APIRouter

from kitflow.api.deps import DB, CurrentUser
from kitflow.schemas.ai import ChatRequest, ChatResponse
from kitflow.services.ai.chat_service import InventoryChatService

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
async def chat(data: ChatRequest, db: DB, current_user: CurrentUser):
    content = await InventoryChatService(db).chat(data.message)
    return ChatResponse(content=content)
