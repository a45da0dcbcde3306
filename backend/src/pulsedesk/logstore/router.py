from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from pulsedesk.logstore import crud
from pulsedesk.logstore.session import get_async_session
from pulsedesk.schemas import ConversationCreate, ConversationUpdate

router = APIRouter()


@router.get("")
async def list_logs(db: AsyncSession = Depends(get_async_session)):
    return [crud.to_document(c) for c in await crud.list_conversations(db)]


@router.get("/{conv_id}")
async def get_log(conv_id: str, db: AsyncSession = Depends(get_async_session)):
    conv = await crud.get_conversation(db, conv_id)
    if not conv:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return crud.to_document(conv)


@router.post("", status_code=201)
async def create_log(payload: ConversationCreate, db: AsyncSession = Depends(get_async_session)):
    conv = await crud.create_conversation(db, payload)
    return {"success": True, "saved": crud.to_document(conv)}


@router.put("/{conv_id}")
async def update_log(
    conv_id: str,
    payload: ConversationUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    conv = await crud.get_conversation(db, conv_id)
    if not conv:
        raise HTTPException(status_code=404, detail="Conversation not found")
    conv = await crud.update_conversation(db, conv, payload)
    return {"success": True, "updated": crud.to_document(conv)}


@router.delete("/{conv_id}")
async def delete_log(conv_id: str, db: AsyncSession = Depends(get_async_session)):
    conv = await crud.get_conversation(db, conv_id)
    if not conv:
        raise HTTPException(status_code=404, detail="Conversation not found")
    await crud.deactivate_conversation(db, conv)
    return {"success": True}
