"""Parsing of the term-extraction completion into search terms and an optional reply.

The model is asked for pure JSON but in practice answers with any of: a bare array of
strings, an object {"assistant_reply", "search_terms"}, either of those inside code
fences, JSON surrounded by prose, or plain prose. The ladder below tries each shape in
order and always ends with a usable result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .utils import is_missing, ordered_json_blocks, strip_code_fences, try_json_loads

logger = logging.getLogger("shopping_assistant.parser")


@dataclass(frozen=True)
class ExtractionResult:
    """Search terms (never empty) plus the reply suggested by the model, if any."""
    search_terms: Tuple[str, ...]
    assistant_reply: Optional[str] = None


def _coerce_terms(value: Any) -> List[str]:
    # Keep strings and plain numbers, trimmed; everything else is dropped.
    if not isinstance(value, list):
        return []
    terms: List[str] = []
    for entry in value:
        if isinstance(entry, bool):
            continue
        if isinstance(entry, (int, float)):
            entry = str(entry)
        if not isinstance(entry, str):
            continue
        cleaned = entry.strip()
        if cleaned:
            terms.append(cleaned)
    return terms


def _shape_result(payload: Any, original_message: str) -> Optional[ExtractionResult]:
    """Purpose: Normalize a decoded JSON value into an ExtractionResult.
    Inputs/Outputs: Inputs are the decoded value and the user message; output is an
        ExtractionResult, or None when the value is neither an array nor an object.
    Side Effects / State: None.
    Dependencies: _coerce_terms.
    Failure Modes: None; unexpected shapes return None so the next attempt can run.
    If Removed: Parsed JSON cannot be mapped to terms/reply.
    Testing Notes: Array -> reply None; object without reply -> reply "".
    """
    # Arrays are terms only; objects carry terms plus an optional reply.
    if isinstance(payload, list):
        terms = _coerce_terms(payload)
        return ExtractionResult(tuple(terms or [original_message]), None)
    if isinstance(payload, dict):
        terms = _coerce_terms(payload.get("search_terms", []))
        reply = payload.get("assistant_reply", "")
        if not isinstance(reply, str):
            reply = ""
        return ExtractionResult(tuple(terms or [original_message]), reply.strip())
    return None


def parse_extraction(raw_text: Optional[str], original_message: str) -> ExtractionResult:
    """Purpose: Turn raw completion text into search terms and an optional reply.
    Inputs/Outputs: Inputs are the model text (may be None) and the original user
        message; output is an ExtractionResult whose search_terms is never empty.
    Side Effects / State: Debug logging only; same input always yields the same result.
    Dependencies: strip_code_fences, ordered_json_blocks, try_json_loads.
    Failure Modes: None; every parse failure falls through to [original_message].
    If Removed: The pipeline has no terms to search for.
    Testing Notes: Cover bare arrays, fenced objects, JSON in prose, and plain prose.
    """
    # Attempt 1: the cleaned text is itself JSON.
    cleaned = strip_code_fences(raw_text or "")
    payload = try_json_loads(cleaned)
    if not is_missing(payload):
        result = _shape_result(payload, original_message)
        if result is not None:
            return result

    # Attempt 2: JSON embedded in surrounding prose.
    for block in ordered_json_blocks(cleaned):
        payload = try_json_loads(block)
        if is_missing(payload):
            continue
        result = _shape_result(payload, original_message)
        if result is not None:
            logger.debug("extraction recovered from embedded json block")
            return result

    # Attempt 3: search for the message itself.
    logger.info("extraction unparseable, falling back to raw message")
    return ExtractionResult((original_message,), None)
