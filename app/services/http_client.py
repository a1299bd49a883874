"""Outbound HTTP client construction for the external AI APIs."""

from typing import Dict, Optional

import httpx


def build_http_client(
    base_url: str,
    api_key: str,
    extra_headers: Optional[Dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Bearer-authenticated client for one external API.

    No timeout is applied; callers bound waiting through task cancellation.
    """
    headers = {"Authorization": f"Bearer {api_key}"}
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        base_url=base_url,
        headers=headers,
        timeout=None,
        transport=transport,
    )
