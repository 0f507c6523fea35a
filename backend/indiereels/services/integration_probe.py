"""Probe the hosted backend on startup and report status."""

import httpx
from indiereels.config import Settings


async def probe_all(settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> dict:
    """Check reachability of the hosted auth and storage APIs. Returns status dict."""
    if not settings.has_backend:
        return {"auth": {"status": "not_configured"}, "storage": {"status": "not_configured"}}

    headers = {"apikey": settings.backend_anon_key}
    base = settings.backend_url.rstrip("/")
    async with httpx.AsyncClient(timeout=5.0, transport=transport) as client:
        return {
            "auth": await _probe(client, f"{base}/auth/v1/health", headers=headers),
            "storage": await _probe(
                client, f"{base}/storage/v1/bucket/{settings.video_bucket}",
                headers={**headers, "Authorization": f"Bearer {settings.backend_anon_key}"},
            ),
        }


async def _probe(client: httpx.AsyncClient, url: str, headers: dict | None = None) -> dict:
    """Probe a single endpoint."""
    try:
        resp = await client.get(url, headers=headers)
        return {
            "status": "ok" if resp.status_code < 400 else "error",
            "code": resp.status_code,
        }
    except httpx.ConnectError:
        return {"status": "unreachable"}
    except httpx.HTTPError as e:
        return {"status": "error", "detail": str(e)[:200]}
