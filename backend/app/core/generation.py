"""
AI generation: title + description -> IdeaBlueprint document.

The provider is an opaque collaborator. GeminiIdeaGenerator calls the Gemini
``generateContent`` REST endpoint with httpx, pulls the first JSON object out
of the model text and validates it. When fallback is enabled, a failed call
returns a sample blueprint instead of raising.
"""

import json
import logging
import re
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from app.schemas import IdeaBlueprint

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

PROMPT_TEMPLATE = """
Generate a comprehensive SaaS idea validation and blueprint for: "{title}"

Description: {description}

Your response should be in JSON format with the following structure:
{{
  "validation": {{
    "score": number from 1-10,
    "feedback": "detailed feedback on strengths and weaknesses",
    "improvements": ["suggestion1", "suggestion2", "suggestion3"]
  }},
  "features": {{
    "core": ["feature1", "feature2", "feature3"],
    "premium": ["premium1", "premium2"],
    "future": ["future1", "future2"]
  }},
  "techStack": {{
    "frontend": ["technology1", "technology2"],
    "backend": ["technology1", "technology2"],
    "database": ["technology1"],
    "hosting": ["technology1"],
    "other": ["technology1", "technology2"]
  }},
  "pricingModel": {{
    "tiers": [
      {{"name": "Free", "price": "$0", "features": ["feature1", "feature2"]}},
      {{"name": "Pro", "price": "$X/month", "features": ["feature1", "feature2", "feature3"]}}
    ],
    "strategy": "Brief pricing strategy explanation"
  }},
  "userFlow": "mermaid flowchart code for user flow diagram",
  "tasks": [
    {{
      "title": "Task 1",
      "description": "Description",
      "priority": "High/Medium/Low",
      "category": "Frontend/Backend/Design/etc"
    }}
  ]
}}
"""


class GenerationError(Exception):
    """The AI provider failed or returned an unusable document."""


class IdeaGenerator(Protocol):
    async def generate(self, title: str, description: str) -> dict[str, Any]: ...


def build_prompt(title: str, description: str) -> str:
    return PROMPT_TEMPLATE.format(title=title, description=description)


def parse_blueprint(text: str) -> dict[str, Any]:
    """Extract the JSON object from model text and validate it as an IdeaBlueprint."""
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise GenerationError("Failed to parse JSON response")
    try:
        raw = json.loads(match.group(0))
        blueprint = IdeaBlueprint.model_validate(raw)
    except (ValueError, ValidationError) as e:
        raise GenerationError(f"Invalid blueprint document: {e}") from e
    return blueprint.model_dump(by_alias=True, mode="json")


def sample_blueprint(title: str) -> dict[str, Any]:
    """Static blueprint used when the provider is unavailable and fallback is on."""
    doc = {
        "validation": {
            "score": 7,
            "feedback": (
                f"{title} shows promise. The concept addresses a clear need in the "
                "market. Consider refining the target audience and feature "
                "prioritization."
            ),
            "improvements": [
                "Focus on a more specific target audience",
                "Prioritize core features for MVP",
                "Develop a clearer monetization strategy",
            ],
        },
        "features": {
            "core": ["User authentication", "Dashboard analytics", "File management"],
            "premium": ["Advanced reporting", "Team collaboration"],
            "future": ["AI-powered recommendations", "Integration marketplace"],
        },
        "techStack": {
            "frontend": ["React", "Next.js", "Tailwind CSS"],
            "backend": ["Python", "FastAPI"],
            "database": ["PostgreSQL"],
            "hosting": ["Vercel"],
            "other": ["Stripe"],
        },
        "pricingModel": {
            "tiers": [
                {"name": "Free", "price": "$0", "features": ["Limited access to core features", "Single user"]},
                {"name": "Pro", "price": "$19/month", "features": ["Full access to core features", "Up to 5 users"]},
                {"name": "Enterprise", "price": "$49/month", "features": ["All features", "Priority support"]},
            ],
            "strategy": "Freemium model with clear upgrade path based on scaling needs",
        },
        "userFlow": (
            "graph TD\n  A[User Sign Up] --> B[Onboarding]\n  B --> C[Dashboard]\n"
            "  C --> D[Create Project]\n  D --> E[Manage Project]"
        ),
        "tasks": [
            {
                "title": "Set up authentication system",
                "description": "Implement user signup, login, and password reset",
                "priority": "High",
                "category": "Backend",
            },
            {
                "title": "Design dashboard UI",
                "description": "Create wireframes and mockups for the main dashboard",
                "priority": "High",
                "category": "Design",
            },
        ],
    }
    return IdeaBlueprint.model_validate(doc).model_dump(by_alias=True, mode="json")


class GeminiIdeaGenerator:
    def __init__(
        self,
        api_key: str | None,
        *,
        model: str,
        base_url: str,
        timeout: float = 60.0,
        fallback: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.fallback = fallback
        self._transport = transport

    async def _call(self, prompt: str) -> str:
        if not self.api_key:
            raise GenerationError("AI provider is not configured")
        url = f"{self.base_url}/models/{self.model}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    url, params={"key": self.api_key}, json=payload
                )
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise GenerationError(f"AI provider request failed: {e}") from e
        try:
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(p.get("text", "") for p in parts)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise GenerationError("AI provider returned no content") from e

    async def generate(self, title: str, description: str) -> dict[str, Any]:
        try:
            text = await self._call(build_prompt(title, description))
            return parse_blueprint(text)
        except GenerationError as e:
            if not self.fallback:
                raise
            logger.warning("Generation failed, returning sample blueprint: %s", e)
            return sample_blueprint(title)
