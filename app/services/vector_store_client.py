"""
Vector Store Client

Thin async wrapper over the OpenAI-compatible files / vector store endpoints.
Every call checks the response status and raises ``PublishError`` carrying the
raw response body, so one failed course can be skipped by the caller without
inspecting HTTP details.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

FILE_PURPOSE = "assistants"


class PublishError(Exception):
    """A document store call failed or returned an unexpected payload."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(f"{message}: {body}" if body else message)
        self.status_code = status_code
        self.body = body


class VectorStoreClient:
    def __init__(self, http: httpx.AsyncClient):
        self._http = http

    async def _send(self, method: str, url: str, action: str, **kwargs) -> httpx.Response:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise PublishError(f"{action} failed", body=str(exc)) from exc
        if not response.is_success:
            raise PublishError(
                f"{action} failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response, action: str) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise PublishError(f"{action} returned invalid JSON", body=response.text) from exc
        if not isinstance(payload, dict):
            raise PublishError(f"{action} returned unexpected payload", body=response.text)
        return payload

    @staticmethod
    def _items(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        data = payload.get("data")
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict) and item.get("id")]

    # Files -----------------------------------------------------------------
    async def upload_file(self, filename: str, content: bytes) -> str:
        response = await self._send(
            "POST",
            "files",
            "Upload",
            data={"purpose": FILE_PURPOSE},
            files={"file": (filename, content, "text/plain")},
        )
        file_id = self._json(response, "Upload").get("id")
        if not file_id:
            raise PublishError("File id not found in upload response", body=response.text)
        logger.info("Uploaded file %s. File ID: %s", filename, file_id)
        return file_id

    async def list_files(self) -> List[Dict[str, Any]]:
        response = await self._send("GET", "files", "List files")
        return self._items(self._json(response, "List files"))

    async def get_file_name(self, file_id: str) -> Optional[str]:
        response = await self._send("GET", f"files/{file_id}", "Get file")
        return self._json(response, "Get file").get("filename")

    async def delete_file(self, file_id: str) -> None:
        await self._send("DELETE", f"files/{file_id}", "Delete file")

    # Vector store membership -----------------------------------------------
    async def attach_file(self, vector_store_id: str, file_id: str) -> None:
        await self._send(
            "POST",
            f"vector_stores/{vector_store_id}/files",
            "Attach",
            json={"file_id": file_id},
        )
        logger.info("Attached file %s to vector store %s.", file_id, vector_store_id)

    async def list_vector_store_files(self, vector_store_id: str) -> List[Dict[str, Any]]:
        response = await self._send(
            "GET", f"vector_stores/{vector_store_id}/files", "List vector store files"
        )
        return self._items(self._json(response, "List vector store files"))

    async def detach_file(self, vector_store_id: str, file_id: str) -> None:
        await self._send(
            "DELETE", f"vector_stores/{vector_store_id}/files/{file_id}", "Detach"
        )

    # Clean-up strategies ---------------------------------------------------
    async def find_existing_file_id(self, vector_store_id: str, filename: str) -> Optional[str]:
        """Id of the collection file whose stored name matches ``filename``."""
        for item in await self.list_vector_store_files(vector_store_id):
            existing = await self.get_file_name(item["id"])
            if existing is not None and existing.lower() == filename.lower():
                return item["id"]
        return None

    async def remove_existing_from_vector_store(self, vector_store_id: str, filename: str) -> None:
        file_id = await self.find_existing_file_id(vector_store_id, filename)
        if file_id is None:
            return
        await self.detach_file(vector_store_id, file_id)
        await self.delete_file(file_id)
        logger.info(
            "Replaced existing file %s (File ID: %s) in vector store %s.",
            filename,
            file_id,
            vector_store_id,
        )

    async def remove_existing_from_files(self, filename: str) -> None:
        for item in await self.list_files():
            existing = item.get("filename")
            if existing is None or existing.lower() != filename.lower():
                continue
            await self.delete_file(item["id"])
            logger.info(
                "Removed existing file %s (File ID: %s) from platform storage before upload.",
                filename,
                item["id"],
            )

    async def remove_all_from_vector_store(self, vector_store_id: str) -> int:
        removed = 0
        for item in await self.list_vector_store_files(vector_store_id):
            await self.detach_file(vector_store_id, item["id"])
            await self.delete_file(item["id"])
            removed += 1
        logger.info("Removed %d file(s) from vector store %s.", removed, vector_store_id)
        return removed

    async def remove_all_files(self) -> int:
        removed = 0
        for item in await self.list_files():
            await self.delete_file(item["id"])
            removed += 1
        logger.info("Removed %d file(s) from platform storage.", removed)
        return removed
