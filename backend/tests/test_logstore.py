import httpx
import pytest

from pulsedesk.logstore.crud import (
    create_conversation,
    deactivate_conversation,
    get_conversation,
    list_conversations,
    to_document,
    update_conversation,
)
from pulsedesk.schemas import ConversationCreate, ConversationUpdate


def _payload(name="Jane Doe", **extra):
    return ConversationCreate(
        chat=[{"User": "I have a rash"}],
        user_info={"name": name, "email": "jane@example.com", "phone_number": "555"},
        report={"summary": "Rash on forearm"},
        **extra,
    )


@pytest.mark.asyncio
async def test_create_and_get_conversation(db_session):
    conv = await create_conversation(
        db_session,
        _payload(matches={"match_1": {"cond_name_eng": "Eczema", "severity": "Low"}}),
    )
    fetched = await get_conversation(db_session, conv.id)

    assert fetched is not None
    doc = to_document(fetched)
    assert doc["_id"] == conv.id
    assert doc["user_info"]["name"] == "Jane Doe"
    assert doc["matches"]["match_1"] == {"cond_name_eng": "Eczema", "severity": "Low", "count": 1}
    assert doc["active"] is True
    assert doc["timestamp"]


@pytest.mark.asyncio
async def test_update_replaces_only_sent_fields(db_session):
    conv = await create_conversation(db_session, _payload())

    conv = await update_conversation(
        db_session, conv, ConversationUpdate(report={"summary": "Cleared up"})
    )

    assert conv.report == {"summary": "Cleared up"}
    assert conv.chat == [{"User": "I have a rash"}]
    assert conv.user_info["email"] == "jane@example.com"


@pytest.mark.asyncio
async def test_deactivated_conversations_are_hidden(db_session):
    keep = await create_conversation(db_session, _payload("Keep"))
    gone = await create_conversation(db_session, _payload("Gone"))

    await deactivate_conversation(db_session, gone)

    assert await get_conversation(db_session, gone.id) is None
    ids = [c.id for c in await list_conversations(db_session)]
    assert ids == [keep.id]


@pytest.mark.asyncio
async def test_router_status_codes(log_app):
    transport = httpx.ASGITransport(app=log_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://logstore") as client:
        created = await client.post(
            "/log",
            json={"chat": [], "user_info": {"name": "Ada"}, "report": {}},
        )
        assert created.status_code == 201
        conv_id = created.json()["saved"]["_id"]

        assert (await client.get("/log/does-not-exist")).status_code == 404
        assert (await client.put("/log/does-not-exist", json={"report": {}})).status_code == 404
        assert (await client.delete(f"/log/{conv_id}")).json() == {"success": True}
        assert (await client.delete(f"/log/{conv_id}")).status_code == 404

        bad = await client.post(
            "/log",
            json={
                "user_info": {"name": "Ada"},
                "matches": {"m": {"cond_name_eng": "Flu", "severity": "Severe"}},
            },
        )
        assert bad.status_code == 422
