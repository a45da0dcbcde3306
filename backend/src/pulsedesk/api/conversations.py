from fastapi import APIRouter, Depends, HTTPException

from pulsedesk.api.deps import get_log_client
from pulsedesk.log_client import LogServiceClient
from pulsedesk.store import filter_conversations

router = APIRouter()


@router.get("")
async def browse_conversations(search: str = "", client: LogServiceClient = Depends(get_log_client)):
    conversations = await client.fetch_all_conversations()
    return filter_conversations(conversations, search)


@router.get("/{conv_id}")
async def get_conversation(conv_id: str, client: LogServiceClient = Depends(get_log_client)):
    conv = await client.fetch_conversation(conv_id)
    if not conv:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conv
