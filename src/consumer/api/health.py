from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request, Response

router = APIRouter()


@router.get("/healthz")
async def healthz(request: Request, response: Response) -> dict[str, Any]:
    ok = getattr(request.app.state, "dispatcher", None) is not None
    response.status_code = 200 if ok else 503
    return {"status": "ok" if ok else "not_ready"}
