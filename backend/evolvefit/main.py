from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from evolvefit.config import settings
from evolvefit.logging_setup import configure_logging
from evolvefit.routes.system import router as system_router
from evolvefit.routes.ai import router as ai_router
from evolvefit.routes.contests import router as contests_router
from evolvefit.routes.community import router as community_router
from evolvefit.routes.rewards import router as rewards_router
from evolvefit.routes.realtime import router as realtime_router
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha,
             kv_backend=settings.kv_backend, ai_configured=bool(settings.gemini_api_key))
    yield
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API for fitness community, contests and AI coaching",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system_router)
app.include_router(ai_router)
app.include_router(contests_router)
app.include_router(community_router)
app.include_router(rewards_router)
app.include_router(realtime_router)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    response: Response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    structlog.contextvars.clear_contextvars()
    return response
