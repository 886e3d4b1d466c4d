from __future__ import annotations
import json
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
import structlog

from evolvefit.deps import get_model_client
from evolvefit.schemas.ai import ChatRequest, ContestProofRequest, FoodRequest, PlanRequest, VerifyContentRequest
from evolvefit.services import prompts
from evolvefit.services.genai import (
    InlineMedia, ModelClient, ReplyFormatError, extract_json_block, extract_json_object, find_json_object, mime_for,
)

log = structlog.get_logger()

router = APIRouter(prefix="/api/ai", tags=["ai"])

# Failure shapes differ per endpoint; existing clients read each one as-is.
NOT_CONFIGURED = {"error": "API key not configured"}

PROOF_FALLBACK = {
    "approved": False,
    "reason": "Unable to verify at this moment. Please ensure clear lighting.",
    "points": 0,
}
PROOF_UNREADABLE = {"approved": False, "reason": "Could not verify", "points": 0}

MODERATION_FALLBACK = {
    "isAuthentic": True,
    "riskScore": 0,
    "category": "safe",
    "reasons": ["AI verification service temporarily unavailable"],
    "recommendations": ["Manual review recommended"],
}

CHAT_FAILURE = {"error": "I'm having trouble connecting to the training server. Please try again."}


def _not_configured(endpoint: str) -> JSONResponse:
    log.error("gemini_not_configured", endpoint=endpoint)
    return JSONResponse(status_code=500, content=NOT_CONFIGURED)


@router.post("/analyze-contest-proof")
async def analyze_contest_proof(request: Request, client: ModelClient = Depends(get_model_client)):
    if not client.configured:
        log.error("gemini_not_configured", endpoint="analyze-contest-proof")
        return dict(PROOF_FALLBACK)
    try:
        body = ContestProofRequest.model_validate(await request.json())
        media = InlineMedia.from_base64(body.media_base64, mime_for(body.media_type))
        prompt = prompts.contest_proof_prompt(body.contest.title, body.contest.description, body.contest.rules)
        text = await client.generate(prompt, media)
        raw = find_json_object(text)
        if raw is None:
            return dict(PROOF_UNREADABLE)
        return json.loads(raw)
    except Exception:
        log.exception("contest_proof_failed")
        return dict(PROOF_FALLBACK)


@router.post("/analyze-food")
async def analyze_food(request: Request, client: ModelClient = Depends(get_model_client)):
    if not client.configured:
        return _not_configured("analyze-food")
    try:
        body = FoodRequest.model_validate(await request.json())
        media = InlineMedia.from_base64(body.base64_image, "image/jpeg")
        text = await client.generate(prompts.food_prompt(body.voice_context), media)
        return extract_json_object(text)
    except Exception:
        log.exception("food_analysis_failed")
        return JSONResponse(status_code=500, content={"error": "Failed to analyze meal"})


@router.post("/verify-content")
async def verify_content(request: Request, client: ModelClient = Depends(get_model_client)):
    if not client.configured:
        log.error("gemini_not_configured", endpoint="verify-content")
        return dict(MODERATION_FALLBACK)
    try:
        body = VerifyContentRequest.model_validate(await request.json())
        text = await client.generate(prompts.moderation_prompt(body.content, body.image_url))
        return extract_json_object(text)
    except Exception:
        log.exception("content_verification_failed")
        return dict(MODERATION_FALLBACK)


def _chat_history(body: ChatRequest) -> list[dict]:
    return [
        {"role": t.role, "parts": [t.content or ""]}
        for t in body.history
        if t.role in ("user", "model")
    ]


@router.post("/chat-trainer")
async def chat_trainer(request: Request, client: ModelClient = Depends(get_model_client)):
    if not client.configured:
        return _not_configured("chat-trainer")
    try:
        body = ChatRequest.model_validate(await request.json())
        meals = [
            {"name": m.get("name"), "description": m.get("description"), "time": m.get("timestamp"), "macros": m.get("macros")}
            for m in body.todays_log.meals
        ]
        history = _chat_history(body)
        message = body.message
        if not history:
            # first turn carries the profile context
            context = prompts.trainer_context(body.user_profile, meals, body.todays_log.total_macros, body.settings)
            message = f"{context}\n\nUser: {body.message}"
        elif history[0]["role"] != "user":
            # the provider rejects histories that open with a model turn
            history = [t for t in history if t["role"] == "user"]
        text = await client.chat(history, message)
        return {"response": text}
    except Exception:
        log.exception("trainer_chat_failed")
        return JSONResponse(status_code=500, content=CHAT_FAILURE)


@router.post("/generate-plan")
async def generate_plan(request: Request, client: ModelClient = Depends(get_model_client)):
    if not client.configured:
        return _not_configured("generate-plan")
    try:
        body = PlanRequest.model_validate(await request.json())
        if body.profile is None:
            return JSONResponse(status_code=400, content={"error": "Profile data required"})

        prompt = prompts.workout_plan_prompt(body.profile) if body.type == "workout" else prompts.meal_plan_prompt(body.profile)
        text = await client.generate(prompt)
        plan = extract_json_block(text)

        key = "schedule" if body.type == "workout" else "meals"
        if not isinstance(plan, dict) or not isinstance(plan.get(key), list) or not plan[key]:
            raise ReplyFormatError(f"Invalid {body.type} plan structure")

        log.info("plan_generated", type=body.type)
        return plan
    except Exception as e:
        log.exception("plan_generation_failed")
        return JSONResponse(status_code=500, content={"error": "Failed to generate plan", "details": str(e) or "Unknown error"})
