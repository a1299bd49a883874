"""
Assistant Client

Async wrapper over the OpenAI-compatible threads / messages / runs endpoints
plus the parser that pulls the final assistant message out of a streamed run.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

logger = logging.getLogger(__name__)

MESSAGE_COMPLETED_EVENT = "event: thread.message.completed"
DATA_PREFIX = "data:"
FALLBACK_ANSWER = "No response received from assistant."


class ProtocolError(Exception):
    """The assistant API returned a non-success status or an incomplete body."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(f"{message}: {body}" if body else message)
        self.status_code = status_code
        self.body = body


def _parse_completed_message(payload_line: str) -> str:
    """Text of the first content item of a ``thread.message.completed`` payload."""
    if payload_line[: len(DATA_PREFIX)].lower() == DATA_PREFIX:
        payload_line = payload_line[len(DATA_PREFIX):].strip()
    if not payload_line:
        return FALLBACK_ANSWER

    try:
        message = json.loads(payload_line)
    except json.JSONDecodeError:
        logger.warning("Completed message payload is not valid JSON")
        return FALLBACK_ANSWER

    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, list) or not content:
        return FALLBACK_ANSWER
    first = content[0]
    text = first.get("text") if isinstance(first, dict) else None
    if not isinstance(text, dict) or "value" not in text:
        return FALLBACK_ANSWER
    return text["value"] or ""


async def consume_answer(lines: AsyncIterator[str]) -> str:
    """Extract the assistant's answer from a run event stream.

    The line following ``event: thread.message.completed`` carries the
    message as JSON. Streams without that event, or with an unusable payload,
    yield ``FALLBACK_ANSWER`` instead of raising.
    """
    payload_line = ""
    marker_seen = False
    async for raw in lines:
        line = raw.strip()
        if marker_seen:
            payload_line = line
            break
        if line == MESSAGE_COMPLETED_EVENT:
            marker_seen = True

    if not payload_line:
        return FALLBACK_ANSWER
    return _parse_completed_message(payload_line)


class AssistantClient:
    def __init__(self, http: httpx.AsyncClient):
        self._http = http

    @staticmethod
    async def _raise_for_status(response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        await response.aread()
        raise ProtocolError(
            f"Error {action}",
            status_code=response.status_code,
            body=response.text,
        )

    async def create_thread(self) -> str:
        response = await self._http.post("threads", json={})
        await self._raise_for_status(response, "creating thread")
        try:
            thread_id = response.json().get("id")
        except (ValueError, AttributeError):
            thread_id = None
        if not thread_id:
            raise ProtocolError("Thread id not found", body=response.text)
        logger.info("Created assistant thread %s", thread_id)
        return thread_id

    async def post_message(
        self, thread_id: str, question: str, organization_ids: Optional[str]
    ) -> None:
        payload = {
            "role": "user",
            "content": [
                {"type": "text", "text": question},
                # hidden scope the assistant uses to filter course documents
                {"type": "text", "text": f"[orgIds:{organization_ids or ''}]"},
            ],
        }
        response = await self._http.post(f"threads/{thread_id}/messages", json=payload)
        await self._raise_for_status(response, "sending message")

    @asynccontextmanager
    async def start_run(
        self, thread_id: str, assistant_id: str
    ) -> AsyncIterator[httpx.Response]:
        """Start a streamed run; yields the open response for line reading."""
        payload = {"assistant_id": assistant_id, "stream": True, "tool_choice": None}
        async with self._http.stream(
            "POST", f"threads/{thread_id}/runs", json=payload
        ) as response:
            await self._raise_for_status(response, "starting run")
            yield response
