from __future__ import annotations
import json
from typing import Any

# Caller text is interpolated verbatim; the model is trusted to treat it as data.

def contest_proof_prompt(title: str, description: str, rules: list[str]) -> str:
    return f"""
You are an AI Referee for a fitness contest called "{title}".

CONTEST RULES & CONTEXT:
- Description: {description}
- Rules: {"; ".join(rules)}

YOUR TASK:
Analyze the uploaded media to verify if the user has completed the challenge.

OUTPUT FORMAT (JSON ONLY):
{{
  "approved": boolean,
  "reason": "A short, encouraging message if approved, or specific reason if rejected.",
  "points": number
}}
"""


def food_prompt(voice_context: str) -> str:
    return f"""
You are an Elite AI Nutritionist specializing in INDIAN CUISINE Analysis.

TASK: Analyze this food image to create a highly accurate nutrition log.
USER CONTEXT: "{voice_context}" (Use this to identify hidden ingredients, cooking oil levels, or specific preparations).

PORTION ANALYSIS (STEP-BY-STEP):
1. Container calibration: identify the plate/bowl size. A standard steel katori is 150ml (approx 150g cooked dal/sabzi); a standard dinner plate is 11 inches.
2. Volume estimation: judge the depth of the food; 1 medium phulka = 30-40g flour; a heap of rice is approx 1.5 cups, a flat spread approx 0.75 cups.
3. Calorie density: visible oil/ghee sheen adds a 5-10g fat buffer; creamy/nutty gravies are denser than watery ones.

OUTPUT REQUIREMENTS:
Return STRICT JSON with this structure only:
{{
  "name": "string",
  "description": "string",
  "macros": {{
    "calories": number,
    "protein": number,
    "carbs": number,
    "fats": number,
    "fiber": number
  }},
  "confidence": number (0-100)
}}
"""


def moderation_prompt(content: str, image_url: str | None) -> str:
    image_line = f"Image URL: {image_url}" if image_url else ""
    return f"""
You are a community content moderator for a fitness and wellness platform. Analyze the following content for authenticity, compliance with community guidelines, and safety.

Content: "{content}"
{image_line}

Evaluate:
1. Is this genuine user-generated content (not AI-generated or spam)?
2. Does it comply with community guidelines (no harassment, hate speech, NSFW)?
3. Is the fitness/wellness context legitimate?
4. Are there any red flags or concerns?

Respond with ONLY this JSON structure:
{{
  "isAuthentic": boolean,
  "riskScore": number (0-100),
  "category": "safe" | "warning" | "violation",
  "reasons": [strings explaining your assessment],
  "recommendations": [strings with suggestions]
}}
"""


def trainer_context(profile: dict[str, Any], meals: list[dict[str, Any]], total_macros: Any, coach: dict[str, Any] | None) -> str:
    coach_block = ""
    if coach:
        coach_block = (
            "COACH SETTINGS:\n"
            f"- Personality: {coach.get('personality')}\n"
            f"- Primary Focus: {coach.get('focus')}\n"
        )
    return f"""
You are EVOLVEFIT AI Trainer, a personalized fitness coach for Indian users.

USER PROFILE:
- Name: {profile.get("name")}
- Age: {profile.get("age")} | Gender: {profile.get("gender")}
- Height: {profile.get("height")}cm | Weight: {profile.get("currentWeight")}kg
- Goal: {profile.get("goal")} (Target: {profile.get("goalWeight")}kg)
- Targets: {json.dumps(profile.get("targets"))}

TODAY'S LOGS:
- Meals: {json.dumps(meals)}
- Total Consumed: {json.dumps(total_macros)}

{coach_block}
STYLE: Encouraging, data-driven, strict but fair. Use Indian food contexts. Be brief.
"""


def workout_plan_prompt(profile: dict[str, Any]) -> str:
    return f"""You are a professional fitness coach. Generate a detailed workout plan in valid JSON format.

User Profile:
- Experience Level: {profile.get("experience") or "Intermediate"}
- Goal: {profile.get("goal") or "Muscle Gain"}
- Activity Level: {profile.get("activityLevel") or "Moderately Active"}
- Days Available: {profile.get("daysPerWeek") or 5}

SPLIT LOGIC:
- If "Very Active" OR "Muscle Gain": generate a "Push Pull Legs" (PPL) 6-day split
- If "Moderately Active": generate an "Upper/Lower" 4-day split
- If "Sedentary" OR "Lightly Active": generate a "Full Body" 3-day split

Return ONLY a valid JSON object (no markdown, no explanation) with this exact structure:
{{
  "splitName": "string",
  "overview": "string",
  "schedule": [
    {{
      "day": "Day 1",
      "focus": "Push",
      "description": "string",
      "exercises": [
        {{"name": "Exercise Name", "sets": 4, "reps": "8-10", "rest": "90s", "tips": "Form tip", "youtubeUrl": "https://www.youtube.com/watch?v=VALID_ID"}}
      ]
    }}
  ]
}}"""


def meal_plan_prompt(profile: dict[str, Any]) -> str:
    targets = profile.get("targets") or {}
    return f"""You are a professional nutritionist specializing in Indian cuisine. Generate a detailed 1-day meal plan in valid JSON format.

User Profile:
- Diet Type: {profile.get("diet") or "Vegetarian"}
- Target Calories: {targets.get("calories") or 2000}
- Protein Target: {targets.get("protein") or 150}g
- Carbs Target: {targets.get("carbs") or 200}g
- Fats Target: {targets.get("fats") or 65}g

REQUIREMENTS:
- Use only authentic Indian home-cooked recipes
- Total calories must match the target
- Include macros for each item
- All meals must be practical to prepare at home

Return ONLY a valid JSON object (no markdown, no explanation) with this exact structure:
{{
  "dayName": "Day 1",
  "totalCalories": 2000,
  "totalProtein": 150,
  "totalCarbs": 200,
  "totalFats": 65,
  "meals": [
    {{
      "mealName": "Breakfast",
      "time": "8:00 AM",
      "items": [
        {{"name": "Dish Name", "quantity": "1 cup", "calories": 300, "protein": 15, "carbs": 40, "fats": 8}}
      ]
    }}
  ]
}}"""
