from __future__ import annotations
from fastapi import APIRouter, Depends, Request
from datetime import datetime, timezone
from evolvefit.config import settings
from evolvefit.deps import get_broadcaster, get_model_client
from evolvefit.realtime.broadcaster import Broadcaster
from evolvefit.services.genai import ModelClient

router = APIRouter(tags=["system"])

@router.get("/health")
async def health(
    request: Request,
    bus: Broadcaster = Depends(get_broadcaster),
    client: ModelClient = Depends(get_model_client),
):
    return {
        "status": "ok",
        "env": settings.environment,
        "time": datetime.now(timezone.utc).isoformat(),
        "request_id": request.headers.get("x-request-id") or request.state.request_id,
        "kv_backend": settings.kv_backend,
        "ai_configured": client.configured,
        "realtime": {"channels": len(bus.channels()), "buffered": bus.buffer_size()},
    }

@router.get("/version")
async def version():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "git_sha": settings.git_sha,
        "model": settings.gemini_model,
    }
