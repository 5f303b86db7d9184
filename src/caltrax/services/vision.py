"""Food image analysis service using LLMs."""

import base64
import binascii
from dataclasses import dataclass
from typing import Protocol

from caltrax.domain.vision import FoodAnalysis

ANALYSIS_PROMPT = (
    "You are a nutrition expert. Identify the food in the image and estimate "
    "the nutrition of the visible portion. Return the food name, calories, "
    "protein, fat and carbs in grams, a list of health pros and cons, a "
    "health score from 1 to 10 and your confidence from 0 to 1."
)

_NULLABLE_NUMBER = {"anyOf": [{"type": "number"}, {"type": "null"}]}

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "nutrition": {
            "type": "object",
            "properties": {
                "calories": {"type": "number", "minimum": 0},
                "protein_g": {"type": "number", "minimum": 0},
                "fat_g": {"type": "number", "minimum": 0},
                "carbs_g": {"type": "number", "minimum": 0},
            },
            "required": ["calories", "protein_g", "fat_g", "carbs_g"],
            "additionalProperties": False,
        },
        "pros": {"type": "array", "items": {"type": "string"}},
        "cons": {"type": "array", "items": {"type": "string"}},
        "health_score": _NULLABLE_NUMBER,
        "confidence": _NULLABLE_NUMBER,
    },
    "required": ["name", "nutrition", "pros", "cons", "health_score", "confidence"],
    "additionalProperties": False,
}


class VisionClient(Protocol):
    """Interface for LLM vision extraction."""

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured vision extraction data."""


@dataclass
class VisionService:
    """Service that prepares analysis prompts and validates results."""

    client: VisionClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze(self, image_bytes: bytes) -> FoodAnalysis:
        """Analyze a food photo via the configured client."""
        raw = await self.client.extract(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_url=_to_data_url(image_bytes),
            schema=ANALYSIS_SCHEMA,
            prompt=ANALYSIS_PROMPT,
        )
        return FoodAnalysis.model_validate(raw if isinstance(raw, dict) else {})


def decode_image(image: str) -> bytes:
    """Decode a base64 image, accepting ``data:`` URLs.

    Raises ValueError for empty or malformed input.
    """
    encoded = image.split(",", 1)[1] if image.startswith("data:") else image
    try:
        decoded = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Image is not valid base64") from exc
    if not decoded:
        raise ValueError("Image is empty")
    return decoded


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
