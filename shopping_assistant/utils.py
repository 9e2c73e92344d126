import json
import re
from typing import Any, Optional, Tuple

CODE_FENCE_RE = re.compile(r"```[A-Za-z0-9_-]*")

_MISSING = object()


def strip_code_fences(text: str) -> str:
    """Purpose: Remove markdown code-fence markers wrapped around model output.
    Inputs/Outputs: Input is raw model text; output is the text without ``` / ```json
        markers, trimmed.
    Side Effects / State: None; pure function.
    Dependencies: Uses CODE_FENCE_RE; called by the response parser before JSON parsing.
    Failure Modes: Returns an empty string for falsy input.
    If Removed: Fenced JSON from the model fails the direct-parse attempt.
    Testing Notes: Validate "```json\\n[...]\\n```" becomes "[...]".
    """
    # Drop every fence marker (with optional language tag) and trim whitespace.
    if not text:
        return ""
    return CODE_FENCE_RE.sub("", text).strip()


def extract_json_block(text: str, opener: str, closer: str) -> Optional[str]:
    """Purpose: Extract the outermost JSON block delimited by opener/closer.
    Inputs/Outputs: Inputs are raw text and a bracket pair ("[", "]") or ("{", "}");
        output is the substring from the first opener to the last closer, or None.
    Side Effects / State: None; pure function.
    Dependencies: None beyond built-ins; used by the response parser.
    Failure Modes: Returns None if the brackets are missing or inverted.
    If Removed: JSON embedded in prose cannot be recovered from model output.
    Testing Notes: Provide strings with text before/after JSON and ensure extraction.
    """
    # Locate the outermost bracket pair to extract a parseable block.
    if not text:
        return None
    start = text.find(opener)
    end = text.rfind(closer)
    if start == -1 or end == -1 or end <= start:
        return None
    return text[start : end + 1]


def ordered_json_blocks(text: str) -> Tuple[str, ...]:
    """Array/object blocks found in text, the one that opens earliest first."""
    candidates = []
    for opener, closer in (("[", "]"), ("{", "}")):
        block = extract_json_block(text, opener, closer)
        if block is not None:
            candidates.append((text.find(opener), block))
    candidates.sort(key=lambda pair: pair[0])
    return tuple(block for _, block in candidates)


def try_json_loads(text: str) -> Any:
    """Purpose: Parse JSON without raising.
    Inputs/Outputs: Input is a string; output is the decoded value, or the module-level
        _MISSING sentinel when decoding fails (so a literal null stays distinguishable).
    Side Effects / State: None; pure function.
    Dependencies: json.loads.
    Failure Modes: None; JSONDecodeError is absorbed.
    If Removed: Callers must wrap every parse attempt in try/except.
    Testing Notes: Malformed input returns the sentinel; "null" returns None.
    """
    # Decode and hide JSON errors behind the sentinel.
    if not text:
        return _MISSING
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return _MISSING


def is_missing(value: Any) -> bool:
    """True when value is the sentinel returned by a failed try_json_loads."""
    return value is _MISSING
