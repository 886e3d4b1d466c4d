from __future__ import annotations
import base64
import httpx
import pytest
from httpx import AsyncClient

IMG = base64.b64encode(b"\xff\xd8fake-jpeg").decode()
CONTEST = {"title": "30 Pushups", "description": "Daily pushups", "rules": ["Full range", "On camera"]}


def _client(app):
    return AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


# ---------- analyze-contest-proof ----------

@pytest.mark.asyncio
async def test_contest_proof_passes_model_json_through(wired, fake_model):
    fake_model.reply = 'Verdict:\n{"approved": true, "reason": "Great form!", "points": 40}'
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/analyze-contest-proof", json={"mediaBase64": IMG, "mediaType": "image", "contest": CONTEST})
    assert r.status_code == 200
    assert r.json() == {"approved": True, "reason": "Great form!", "points": 40}
    call = fake_model.calls[0]
    assert call["media"].mime_type == "image/jpeg"
    assert '"30 Pushups"' in call["prompt"]
    assert "Full range; On camera" in call["prompt"]


@pytest.mark.asyncio
async def test_contest_proof_video_uses_mp4(wired, fake_model):
    fake_model.reply = '{"approved": false, "reason": "blurry", "points": 0}'
    async with _client(wired) as ac:
        await ac.post("/api/ai/analyze-contest-proof", json={"mediaBase64": IMG, "mediaType": "video", "contest": CONTEST})
    assert fake_model.calls[0]["media"].mime_type == "video/mp4"


@pytest.mark.asyncio
async def test_contest_proof_without_json_reply(wired, fake_model):
    fake_model.reply = "Looks good to me"
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/analyze-contest-proof", json={"mediaBase64": IMG, "mediaType": "image", "contest": CONTEST})
    assert r.status_code == 200
    assert r.json() == {"approved": False, "reason": "Could not verify", "points": 0}


@pytest.mark.asyncio
async def test_contest_proof_provider_error_soft_fails(wired, fake_model):
    fake_model.error = RuntimeError("upstream 503")
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/analyze-contest-proof", json={"mediaBase64": IMG, "contest": CONTEST})
    assert r.status_code == 200
    assert r.json()["approved"] is False
    assert r.json()["points"] == 0
    assert "clear lighting" in r.json()["reason"]


@pytest.mark.asyncio
async def test_contest_proof_missing_fields_soft_fails(wired, fake_model):
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/analyze-contest-proof", json={"mediaType": "image"})
    assert r.status_code == 200
    assert r.json()["approved"] is False
    assert fake_model.calls == []


@pytest.mark.asyncio
async def test_contest_proof_without_credential_soft_fails(wired, fake_model):
    fake_model.configured = False
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/analyze-contest-proof", json={"mediaBase64": IMG, "contest": CONTEST})
    assert r.status_code == 200
    assert r.json()["approved"] is False


# ---------- analyze-food ----------

@pytest.mark.asyncio
async def test_food_returns_macros(wired, fake_model):
    fake_model.reply = '```json\n{"name": "Dal", "description": "Toor dal", "macros": {"calories": 210, "protein": 12, "carbs": 30, "fats": 5, "fiber": 6}, "confidence": 80}\n```'
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/analyze-food", json={"base64Image": IMG, "voiceContext": "extra ghee"})
    assert r.status_code == 200
    assert r.json()["macros"]["calories"] == 210
    assert 'USER CONTEXT: "extra ghee"' in fake_model.calls[0]["prompt"]
    assert fake_model.calls[0]["media"].mime_type == "image/jpeg"


@pytest.mark.asyncio
async def test_food_without_credential_is_500(wired, fake_model):
    fake_model.configured = False
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/analyze-food", json={"base64Image": IMG})
    assert r.status_code == 500
    assert r.json() == {"error": "API key not configured"}


@pytest.mark.asyncio
async def test_food_unparsable_reply_is_500(wired, fake_model):
    fake_model.reply = "That looks delicious!"
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/analyze-food", json={"base64Image": IMG})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to analyze meal"}


# ---------- verify-content ----------

@pytest.mark.asyncio
async def test_verify_content_returns_assessment(wired, fake_model):
    fake_model.reply = '{"isAuthentic": false, "riskScore": 85, "category": "violation", "reasons": ["spam"], "recommendations": ["remove"]}'
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/verify-content", json={"content": "Buy pills now", "imageUrl": "http://x/y.jpg"})
    assert r.status_code == 200
    assert r.json()["category"] == "violation"
    prompt = fake_model.calls[0]["prompt"]
    assert 'Content: "Buy pills now"' in prompt
    assert "Image URL: http://x/y.jpg" in prompt
    assert fake_model.calls[0]["media"] is None


@pytest.mark.asyncio
async def test_verify_content_failure_is_safe_fallback(wired, fake_model):
    fake_model.reply = "no idea"
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/verify-content", json={"content": "hello"})
    assert r.status_code == 200
    body = r.json()
    assert body["isAuthentic"] is True and body["riskScore"] == 0 and body["category"] == "safe"
    assert body["recommendations"] == ["Manual review recommended"]


@pytest.mark.asyncio
async def test_verify_content_without_credential_is_safe_fallback(wired, fake_model):
    fake_model.configured = False
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/verify-content", json={"content": "hello"})
    assert r.status_code == 200
    assert r.json()["reasons"] == ["AI verification service temporarily unavailable"]


# ---------- chat-trainer ----------

PROFILE = {"name": "Asha", "age": 29, "gender": "female", "height": 162, "currentWeight": 60,
           "goal": "Fat Loss", "goalWeight": 55, "targets": {"calories": 1700}}


@pytest.mark.asyncio
async def test_chat_first_turn_carries_profile_context(wired, fake_model):
    fake_model.reply = "Eat more protein."
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/chat-trainer", json={
            "message": "What should I eat?", "history": [], "userProfile": PROFILE,
            "todaysLog": {"meals": [{"name": "Poha", "timestamp": "09:00", "macros": {"calories": 250}}], "totalMacros": {"calories": 250}},
            "settings": {"personality": "strict", "focus": "nutrition"},
        })
    assert r.status_code == 200
    assert r.json() == {"response": "Eat more protein."}
    call = fake_model.calls[0]
    assert call["history"] == []
    assert "Name: Asha" in call["message"]
    assert "Personality: strict" in call["message"]
    assert call["message"].endswith("User: What should I eat?")


@pytest.mark.asyncio
async def test_chat_drops_leading_model_turns(wired, fake_model):
    fake_model.reply = "ok"
    history = [
        {"role": "model", "content": "Hi!"},
        {"role": "user", "content": "Hello"},
        {"role": "system", "content": "ignored"},
    ]
    async with _client(wired) as ac:
        await ac.post("/api/ai/chat-trainer", json={"message": "next", "history": history, "userProfile": PROFILE})
    call = fake_model.calls[0]
    assert call["history"] == [{"role": "user", "parts": ["Hello"]}]
    assert call["message"] == "next"


@pytest.mark.asyncio
async def test_chat_failure_is_500(wired, fake_model):
    fake_model.error = RuntimeError("timeout")
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/chat-trainer", json={"message": "hi"})
    assert r.status_code == 500
    assert "training server" in r.json()["error"]


# ---------- generate-plan ----------

@pytest.mark.asyncio
async def test_plan_requires_profile(wired):
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/generate-plan", json={"type": "meal"})
    assert r.status_code == 400
    assert r.json() == {"error": "Profile data required"}


@pytest.mark.asyncio
async def test_workout_plan_from_fenced_reply(wired, fake_model):
    fake_model.reply = 'Here:\n```json\n{"splitName": "PPL", "overview": "x", "schedule": [{"day": "Day 1", "focus": "Push", "exercises": []}]}\n```'
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/generate-plan", json={"type": "workout", "profile": {"goal": "Muscle Gain"}})
    assert r.status_code == 200
    assert r.json()["splitName"] == "PPL"
    assert "Goal: Muscle Gain" in fake_model.calls[0]["prompt"]


@pytest.mark.asyncio
async def test_meal_plan_with_empty_meals_is_rejected(wired, fake_model):
    fake_model.reply = '{"dayName": "Day 1", "meals": []}'
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/generate-plan", json={"type": "meal", "profile": {"diet": "Vegan"}})
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "Failed to generate plan"
    assert "meal plan structure" in body["details"]


@pytest.mark.asyncio
async def test_plan_without_credential_is_500(wired, fake_model):
    fake_model.configured = False
    async with _client(wired) as ac:
        r = await ac.post("/api/ai/generate-plan", json={"type": "meal", "profile": {}})
    assert r.status_code == 500
    assert r.json() == {"error": "API key not configured"}
