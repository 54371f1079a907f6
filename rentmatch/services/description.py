"""Listing description generation using Gemini with a template fallback."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

try:
    import google.generativeai as genai
except Exception:  # pragma: no cover - optional dependency
    genai = None

from ..models.listing import PropertyDraft
from ..models.pricing import DescriptionResult
from ..utils.logging import get_logger

LOGGER = get_logger("services.description")

DEFAULT_MODEL = "gemini-2.5-flash"
MAX_LISTED_AMENITIES = 5
GENERIC_DESCRIPTION = "Beautiful rental property available. Contact us for more details!"

DESCRIPTION_PROMPT = """Generate an engaging rental property description for:
- {bedrooms} bedroom, {bathrooms} bathroom {property_type}
- Location: {location}
- Rent: {rent}
- Amenities: {amenities}
- Square footage: {square_footage} sq ft

Make it compelling, highlight key features, and appeal to potential renters.
Do not invent numbers that are not listed above. Keep it under 300 words."""

_QUOTA_MARKERS = ("429", "quota", "resource_exhausted", "rate limit")


@dataclass
class LLMQuotaState:
    """Whether the LLM quota is known to be exhausted.

    Owned by whoever builds the generator so that tests and separate app
    instances never share the flag.
    """

    exceeded: bool = False
    exceeded_at: Optional[datetime] = None
    reason: Optional[str] = None

    @classmethod
    def from_env(cls) -> "LLMQuotaState":
        flag = os.getenv("LLM_QUOTA_EXCEEDED", "").strip().lower() in {"1", "true", "yes"}
        return cls(exceeded=flag, reason="quota_exceeded_env" if flag else None)

    def mark_exceeded(self, reason: str = "quota_exceeded") -> None:
        self.exceeded = True
        self.exceeded_at = datetime.now(timezone.utc)
        self.reason = reason


class DescriptionGenerator:
    def __init__(
        self,
        quota_state: Optional[LLMQuotaState] = None,
        model: Optional[str] = None,
        client: Any = None,
    ) -> None:
        self.quota_state = quota_state or LLMQuotaState.from_env()
        self.api_key = os.getenv("GOOGLE_API_KEY")
        preferred = model or os.getenv("LLM_MODEL") or DEFAULT_MODEL
        self.model_name = preferred.split("/", 1)[-1] if preferred.startswith("models/") else preferred
        self._model = client
        if self._model is None and self.api_key and genai is not None:
            try:
                genai.configure(api_key=self.api_key)
                self._model = genai.GenerativeModel(self.model_name)
            except Exception as exc:
                LOGGER.warning("Failed to initialise Gemini client: %s", exc)
                self._model = None

    @property
    def available(self) -> bool:
        return self._model is not None and not self.quota_state.exceeded

    def generate(self, draft: Optional[PropertyDraft]) -> DescriptionResult:
        if draft is None or draft.is_empty():
            return DescriptionResult(
                description=GENERIC_DESCRIPTION,
                source="template",
                fallback=True,
                fallback_reason="missing_property_data",
            )

        if self._model is None:
            return self._fallback(draft, "not_configured")
        if self.quota_state.exceeded:
            return self._fallback(draft, self.quota_state.reason or "quota_exceeded")

        prompt = DESCRIPTION_PROMPT.format(**_prompt_fields(draft))
        try:
            response = self._model.generate_content(
                prompt,
                generation_config={"temperature": 0.8, "max_output_tokens": 400},
            )
            text = self._extract_text(response).strip()
            if not text:
                raise ValueError("Empty response from Gemini")
        except Exception as exc:
            if _is_quota_error(exc):
                self.quota_state.mark_exceeded()
                LOGGER.warning("llm_quota_exceeded model=%s error=%s", self.model_name, exc)
            else:
                LOGGER.warning("Gemini description failed: %s", exc)
            return self._fallback(draft, "api_error")

        LOGGER.info("description_generated model=%s length=%s", self.model_name, len(text))
        return DescriptionResult(description=text, source="llm", fallback=False)

    def _fallback(self, draft: PropertyDraft, reason: str) -> DescriptionResult:
        LOGGER.info("description_fallback reason=%s", reason)
        return DescriptionResult(
            description=template_description(draft),
            source="template",
            fallback=True,
            fallback_reason=reason,
        )

    def _extract_text(self, response: Any) -> str:
        if hasattr(response, "text") and response.text:
            return response.text
        if hasattr(response, "candidates"):
            for candidate in response.candidates:
                if candidate.content.parts:
                    return "".join(part.text for part in candidate.content.parts if getattr(part, "text", None))
        raise ValueError("Empty response from Gemini")


def template_description(draft: PropertyDraft) -> str:
    """Deterministic description assembled from whatever fields are present."""

    bedrooms = draft.bedrooms if draft.bedrooms is not None else "multi"
    text = f"Beautiful {bedrooms}-bedroom {draft.property_type or 'property'}"
    if draft.city:
        text += f" located in {draft.city}"
        if draft.state:
            text += f", {draft.state}"
    text += ". "

    if draft.bathrooms:
        baths = _number(draft.bathrooms)
        text += f"Features {baths} bathroom{'s' if draft.bathrooms > 1 else ''}"
        if draft.square_footage:
            text += f" with {draft.square_footage:,} square feet of living space"
        text += ". "
    elif draft.square_footage:
        text += f"Offers {draft.square_footage:,} square feet of living space. "

    if draft.amenities:
        text += "Amenities include: " + ", ".join(draft.amenities[:MAX_LISTED_AMENITIES])
        if len(draft.amenities) > MAX_LISTED_AMENITIES:
            text += " and more"
        text += ". "

    if draft.rent:
        text += f"Available for INR {int(round(draft.rent)):,}/month. "

    return text + "Contact us today to schedule a viewing!"


def _prompt_fields(draft: PropertyDraft) -> dict:
    location = ", ".join(part for part in (draft.city, draft.state) if part) or "Great location"
    return {
        "bedrooms": draft.bedrooms if draft.bedrooms is not None else "Multiple",
        "bathrooms": _number(draft.bathrooms) if draft.bathrooms else "Multiple",
        "property_type": draft.property_type or "property",
        "location": location,
        "rent": f"INR {int(round(draft.rent)):,} per month" if draft.rent else "Competitive pricing",
        "amenities": ", ".join(draft.amenities) if draft.amenities else "Various amenities available",
        "square_footage": draft.square_footage or "Spacious",
    }


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def _is_quota_error(exc: Exception) -> bool:
    if getattr(exc, "code", None) == 429 or getattr(exc, "status_code", None) == 429:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _QUOTA_MARKERS)


__all__ = ["DescriptionGenerator", "LLMQuotaState", "template_description"]
