import pytest

from rentmatch.models.listing import PropertyDraft
from rentmatch.services.description import (
    GENERIC_DESCRIPTION,
    DescriptionGenerator,
    LLMQuotaState,
    template_description,
)


class _Response:
    def __init__(self, text):
        self.text = text


class _FakeModel:
    def __init__(self, text="A bright home in Pune.", error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def generate_content(self, prompt, generation_config=None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return _Response(self.text)


def _draft(**overrides) -> PropertyDraft:
    fields = {
        "property_type": "apartment",
        "bedrooms": 2,
        "bathrooms": 2,
        "square_footage": 1050,
        "city": "Pune",
        "state": "Maharashtra",
        "amenities": ["parking", "gym", "security"],
        "rent": 42000,
    }
    fields.update(overrides)
    return PropertyDraft(**fields)


@pytest.fixture(autouse=True)
def _no_llm_env(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("LLM_QUOTA_EXCEEDED", raising=False)


def test_template_description_mentions_known_fields():
    text = template_description(_draft())
    assert text.startswith("Beautiful 2-bedroom apartment located in Pune, Maharashtra. ")
    assert "Features 2 bathrooms with 1,050 square feet of living space." in text
    assert "Amenities include: parking, gym, security." in text
    assert "Available for INR 42,000/month." in text
    assert text.endswith("Contact us today to schedule a viewing!")


def test_template_truncates_long_amenity_lists():
    text = template_description(_draft(amenities=list("abcdefg")))
    assert "Amenities include: a, b, c, d, e and more." in text


def test_unconfigured_generator_uses_template():
    generator = DescriptionGenerator()
    result = generator.generate(_draft())
    assert result.source == "template"
    assert result.fallback is True
    assert result.fallback_reason == "not_configured"


def test_missing_property_data():
    result = DescriptionGenerator(client=_FakeModel()).generate(PropertyDraft())
    assert result.description == GENERIC_DESCRIPTION
    assert result.fallback_reason == "missing_property_data"


def test_llm_description_when_available():
    model = _FakeModel()
    result = DescriptionGenerator(client=model).generate(_draft())
    assert result.source == "llm"
    assert result.fallback is False
    assert result.description == "A bright home in Pune."
    assert "INR 42,000 per month" in model.prompts[0]


def test_quota_error_flips_injected_state():
    state = LLMQuotaState()
    model = _FakeModel(error=RuntimeError("429 Resource has been exhausted (e.g. check quota)."))
    generator = DescriptionGenerator(quota_state=state, client=model)

    first = generator.generate(_draft())
    assert first.fallback_reason == "api_error"
    assert state.exceeded is True
    assert state.exceeded_at is not None

    second = generator.generate(_draft())
    assert second.fallback_reason == "quota_exceeded"
    assert len(model.prompts) == 1


def test_other_errors_do_not_mark_quota():
    state = LLMQuotaState()
    generator = DescriptionGenerator(quota_state=state, client=_FakeModel(error=ValueError("bad gateway")))
    assert generator.generate(_draft()).fallback_reason == "api_error"
    assert state.exceeded is False


def test_quota_state_is_per_generator():
    exhausted = DescriptionGenerator(
        quota_state=LLMQuotaState(),
        client=_FakeModel(error=RuntimeError("quota exceeded")),
    )
    exhausted.generate(_draft())
    fresh = DescriptionGenerator(quota_state=LLMQuotaState(), client=_FakeModel())
    assert fresh.generate(_draft()).source == "llm"


def test_quota_flag_from_environment(monkeypatch):
    monkeypatch.setenv("LLM_QUOTA_EXCEEDED", "true")
    generator = DescriptionGenerator(client=_FakeModel())
    result = generator.generate(_draft())
    assert result.fallback_reason == "quota_exceeded_env"
    assert generator.available is False


def test_quota_timestamp_is_timezone_aware():
    state = LLMQuotaState()
    state.mark_exceeded()
    assert state.exceeded_at.tzinfo is not None
