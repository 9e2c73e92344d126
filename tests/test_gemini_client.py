"""Gemini wrapper: configuration, caching, and error wrapping (SDK patched out)."""

from dataclasses import replace

import pytest

from shopping_assistant import gemini_client
from shopping_assistant.errors import UpstreamLLMError
from shopping_assistant.gemini_client import GeminiClient, _normalize_model_name


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    instances = []

    def __init__(self, model_name, system_instruction=None):
        self.model_name = model_name
        self.system_instruction = system_instruction
        self.calls = []
        self.error = None
        self.text = ' ["pan"] '
        FakeModel.instances.append(self)

    def generate_content(self, contents, generation_config=None):
        self.calls.append((contents, generation_config))
        if self.error is not None:
            raise self.error
        return FakeResponse(self.text)


@pytest.fixture(autouse=True)
def fake_sdk(monkeypatch):
    FakeModel.instances = []
    configured = {}
    monkeypatch.setattr(gemini_client.genai, "configure", lambda **kwargs: configured.update(kwargs))
    monkeypatch.setattr(gemini_client.genai, "GenerativeModel", FakeModel)
    return configured


def test_complete_returns_stripped_text(settings, fake_sdk):
    client = GeminiClient(settings)

    assert client.complete("instr", "quiero pan") == '["pan"]'
    assert fake_sdk == {"api_key": "test-key"}
    model = FakeModel.instances[0]
    assert model.system_instruction == "instr"
    contents, config = model.calls[0]
    assert contents == "quiero pan"
    assert config["response_mime_type"] == "application/json"


def test_models_are_cached_per_instruction(settings):
    client = GeminiClient(settings)

    client.complete("instr", "a")
    client.complete("instr", "b")
    client.complete("other", "c")

    assert len(FakeModel.instances) == 2


def test_sdk_errors_become_upstream_errors(settings):
    client = GeminiClient(settings)
    client.complete("instr", "warm up")
    FakeModel.instances[0].error = PermissionError("invalid key")

    with pytest.raises(UpstreamLLMError) as excinfo:
        client.complete("instr", "leche")
    assert isinstance(excinfo.value.__cause__, PermissionError)


def test_none_text_becomes_empty_string(settings):
    client = GeminiClient(settings)
    client.complete("instr", "warm up")
    FakeModel.instances[0].text = None

    assert client.complete("instr", "leche") == ""


def test_missing_key_is_rejected(settings):
    with pytest.raises(ValueError):
        GeminiClient(replace(settings, gemini_api_key=""))


def test_model_name_normalization(settings):
    assert _normalize_model_name(" models/gemini-2.5-flash ") == "gemini-2.5-flash"
    assert _normalize_model_name(None) == ""
    assert GeminiClient(replace(settings, gemini_model="models/gemini-x")).model_name == "gemini-x"
