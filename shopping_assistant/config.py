from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

BASE_DIR = Path(__file__).resolve().parent

SELECTION_MODE_BEST = "best"
SELECTION_MODE_FLATTEN = "flatten"
SELECTION_MODES = {SELECTION_MODE_BEST, SELECTION_MODE_FLATTEN}

DEFAULT_VTEX_ENVIRONMENT = "vtexcommercestable.com.br"
DEFAULT_PLACEHOLDER_IMAGE = "https://via.placeholder.com/300x300?text=Sin+imagen"
DEFAULT_UNAVAILABLE_LABEL = "Precio no disponible"
DEFAULT_REPLY_TEMPLATE = "Busqué productos para: {terms}"


@dataclass(frozen=True)
class Settings:
    """Configuration container for the LLM, the catalog backend, and product formatting."""
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.2
    vtex_account: str = ""
    vtex_environment: str = DEFAULT_VTEX_ENVIRONMENT
    vtex_app_key: str = ""
    vtex_app_token: str = ""
    catalog_timeout_sec: float = 10.0
    results_per_term: int = 3
    selection_mode: str = SELECTION_MODE_BEST
    preferred_brand: str = ""
    price_locale: str = "es-AR"
    price_currency: str = "ARS"
    price_unavailable_label: str = DEFAULT_UNAVAILABLE_LABEL
    placeholder_image_url: str = DEFAULT_PLACEHOLDER_IMAGE
    storefront_url: str = ""
    reply_template: str = DEFAULT_REPLY_TEMPLATE
    max_terms: int = 5
    cors_origins: Tuple[str, ...] = ("*",)
    prompts_dir: Path = BASE_DIR / "prompts"
    log_level: str = "INFO"

    @property
    def catalog_base_url(self) -> str:
        """Base URL of the catalog search host for the configured account."""
        return f"https://{self.vtex_account}.{self.vtex_environment}"


def _split_csv(value: str) -> Tuple[str, ...]:
    # Comma-separated env value into a tuple without blanks.
    return tuple(part.strip() for part in value.split(",") if part.strip())


def load_settings() -> Settings:
    """Purpose: Load configuration from environment variables and defaults.
    Inputs/Outputs: No inputs; returns a Settings instance.
    Side Effects / State: Reads environment variables.
    Dependencies: Uses os.getenv and BASE_DIR for the prompt directory.
    Failure Modes: Invalid numeric env values (RESULTS_PER_TERM, CATALOG_TIMEOUT_SEC,
        MAX_TERMS, LLM_TEMPERATURE) or an unknown SELECTION_MODE raise ValueError.
    If Removed: App cannot configure the LLM or the catalog and fails at startup.
    Testing Notes: Verify defaults and overrides via environment variables.
    """
    # Read raw values, validate the ones with constrained ranges, then build Settings.
    selection_mode = os.getenv("SELECTION_MODE", SELECTION_MODE_BEST).strip().lower()
    if selection_mode not in SELECTION_MODES:
        raise ValueError(
            f"SELECTION_MODE must be one of {sorted(SELECTION_MODES)}, got {selection_mode!r}"
        )
    results_per_term = int(os.getenv("RESULTS_PER_TERM", "3"))
    if results_per_term < 1:
        raise ValueError("RESULTS_PER_TERM must be at least 1")
    catalog_timeout = float(os.getenv("CATALOG_TIMEOUT_SEC", "10"))
    if catalog_timeout <= 0:
        raise ValueError("CATALOG_TIMEOUT_SEC must be positive")

    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        llm_temperature=float(os.getenv("LLM_TEMPERATURE", "0.2")),
        vtex_account=os.getenv("VTEX_ACCOUNT", "").strip(),
        vtex_environment=os.getenv("VTEX_ENVIRONMENT", DEFAULT_VTEX_ENVIRONMENT).strip(),
        vtex_app_key=os.getenv("VTEX_APP_KEY", ""),
        vtex_app_token=os.getenv("VTEX_APP_TOKEN", ""),
        catalog_timeout_sec=catalog_timeout,
        results_per_term=results_per_term,
        selection_mode=selection_mode,
        preferred_brand=os.getenv("PREFERRED_BRAND", "").strip(),
        price_locale=os.getenv("PRICE_LOCALE", "es-AR").strip(),
        price_currency=os.getenv("PRICE_CURRENCY", "ARS").strip().upper(),
        price_unavailable_label=os.getenv("PRICE_UNAVAILABLE_LABEL", DEFAULT_UNAVAILABLE_LABEL),
        placeholder_image_url=os.getenv("PLACEHOLDER_IMAGE_URL", DEFAULT_PLACEHOLDER_IMAGE),
        storefront_url=os.getenv("STOREFRONT_URL", "").strip().rstrip("/"),
        reply_template=os.getenv("REPLY_TEMPLATE", DEFAULT_REPLY_TEMPLATE),
        max_terms=int(os.getenv("MAX_TERMS", "5")),
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")) or ("*",),
        prompts_dir=(BASE_DIR / "prompts").resolve(),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
