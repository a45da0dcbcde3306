"""
Client for the remote conversation-log service.

Every call is a single request/response round trip. Failures (transport
errors, non-2xx statuses, undecodable bodies) are logged and turned into a
sentinel value, never raised:

  fetch_conversation       -> None
  fetch_all_conversations  -> []
  save/update/delete       -> {"success": False, "error": "..."}
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from pulsedesk.core.config import settings

logger = logging.getLogger(__name__)


def _drop_none(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in payload.items() if v is not None}


class LogServiceClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.LOG_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.LOG_API_TIMEOUT_SECONDS
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        async with self._client() as client:
            resp = await client.request(method, path, json=json)
            resp.raise_for_status()
            return resp.json()

    async def fetch_conversation(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        try:
            return await self._request("GET", f"/log/{conversation_id}")
        except (httpx.HTTPError, ValueError):
            logger.exception("Error fetching conversation %s", conversation_id)
            return None

    async def fetch_all_conversations(self) -> List[Dict[str, Any]]:
        try:
            data = await self._request("GET", "/log")
        except (httpx.HTTPError, ValueError):
            logger.exception("Error fetching conversations")
            return []
        return data if isinstance(data, list) else []

    async def save_conversation(
        self,
        chat: List[Dict[str, str]],
        user_info: Dict[str, Any],
        report: Any,
        matches: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload = _drop_none(
            {"chat": chat, "user_info": user_info, "report": report, "matches": matches}
        )
        try:
            return await self._request("POST", "/log", json=payload)
        except (httpx.HTTPError, ValueError):
            logger.exception("Error saving conversation")
            return {"success": False, "error": "Failed to save conversation"}

    async def update_conversation(self, conversation_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """PUT a partial document; keys set to None are left out of the body."""
        try:
            return await self._request("PUT", f"/log/{conversation_id}", json=_drop_none(updates))
        except (httpx.HTTPError, ValueError):
            logger.exception("Error updating conversation %s", conversation_id)
            return {"success": False, "error": "Failed to update conversation"}

    async def delete_conversation(self, conversation_id: str) -> Dict[str, Any]:
        try:
            return await self._request("DELETE", f"/log/{conversation_id}")
        except (httpx.HTTPError, ValueError):
            logger.exception("Error deleting conversation %s", conversation_id)
            return {"success": False, "error": "Failed to delete conversation"}
