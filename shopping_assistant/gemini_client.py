from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

import google.generativeai as genai

from .config import Settings
from .errors import UpstreamLLMError

logger = logging.getLogger("shopping_assistant.llm")

JSON_MIME_TYPE = "application/json"


class GeminiClient:
    """Thin wrapper around the Gemini SDK for single-turn JSON completions."""

    def __init__(self, settings: Settings) -> None:
        """Purpose: Configure the Gemini SDK and initialize the model cache.
        Inputs/Outputs: Input is Settings; no return value.
        Side Effects / State: Configures SDK global API key.
        Dependencies: Uses google.generativeai and Settings from config.
        Failure Modes: Raises ValueError if API key or model name is missing.
        If Removed: Term extraction cannot call the LLM and the app fails at startup.
        Testing Notes: Validate missing key raises ValueError and models are cached.
        """
        # Configure API key; models are built lazily per system instruction.
        if not settings.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required")
        self._model_name = _normalize_model_name(settings.gemini_model)
        if not self._model_name:
            raise ValueError("Gemini model name is required")
        self._temperature = settings.llm_temperature
        genai.configure(api_key=settings.gemini_api_key)
        self._models: Dict[Tuple[str, str], genai.GenerativeModel] = {}

    @property
    def model_name(self) -> str:
        return self._model_name

    def _get_model(self, system_instruction: str) -> genai.GenerativeModel:
        key = (self._model_name, system_instruction)
        if key not in self._models:
            self._models[key] = genai.GenerativeModel(self._model_name, system_instruction=system_instruction)
        return self._models[key]

    def complete(self, system_instruction: str, message: str, max_output_tokens: int = 1024) -> str:
        """Purpose: Run one completion for a user message under a system instruction.
        Inputs/Outputs: Inputs are the system instruction and the user message; returns
            the raw response text (possibly empty).
        Side Effects / State: One network call; may add a model to the internal cache.
        Dependencies: genai.GenerativeModel.generate_content with a JSON mime type.
        Failure Modes: Any SDK, network, auth or quota error (including a blocked
            response whose text cannot be read) is raised as UpstreamLLMError.
        If Removed: The pipeline cannot extract search terms.
        Testing Notes: Patch genai.GenerativeModel to raise and assert UpstreamLLMError.
        """
        # Ask for JSON output and wrap every SDK failure in the pipeline's error type.
        try:
            response = self._get_model(system_instruction).generate_content(
                message,
                generation_config={
                    "temperature": self._temperature,
                    "max_output_tokens": max_output_tokens,
                    "response_mime_type": JSON_MIME_TYPE,
                },
            )
            text: Optional[str] = response.text
        except Exception as exc:
            logger.warning("llm model=%s error=%s", self._model_name, exc.__class__.__name__)
            raise UpstreamLLMError(f"LLM completion failed: {exc.__class__.__name__}") from exc
        return (text or "").strip()


def _normalize_model_name(name: Optional[str]) -> str:
    """Purpose: Normalize model names by stripping prefix and whitespace.
    Inputs/Outputs: Input is a model name string; output is normalized name.
    Side Effects / State: None.
    Dependencies: None; used by GeminiClient.
    Failure Modes: Returns empty string for falsy input.
    If Removed: "models/..." names from the console would be sent verbatim.
    Testing Notes: Ensure "models/foo" becomes "foo" and whitespace is trimmed.
    """
    # Strip "models/" prefix and whitespace.
    if not name:
        return ""
    cleaned = name.strip()
    if cleaned.startswith("models/"):
        return cleaned.split("/", 1)[1]
    return cleaned
