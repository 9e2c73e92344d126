from __future__ import annotations

from pathlib import Path

EXTRACTION_PROMPT_FILE = "term_extraction.txt"


def load_prompt(prompt_path: Path) -> str:
    """Purpose: Load a prompt file as UTF-8 text and strip BOM if present.
    Inputs/Outputs: Input is a Path to the prompt file; output is the decoded string.
    Side Effects / State: None; pure function reading the filesystem.
    Dependencies: Uses Path.read_text/read_bytes; used when building the system instruction.
    Failure Modes: UnicodeDecodeError triggers a fallback decode with errors ignored;
        a missing file raises FileNotFoundError at startup.
    If Removed: The extraction instruction cannot be loaded and the LLM call has no prompt.
    Testing Notes: Validate BOM-stripping and fallback decoding on non-UTF8 files.
    """
    # Read as UTF-8 and fall back to a tolerant decode if needed.
    try:
        return prompt_path.read_text(encoding="utf-8").lstrip("\ufeff")
    except UnicodeDecodeError:
        raw = prompt_path.read_bytes()
        text = raw.decode("utf-8", errors="ignore")
        return text.lstrip("\ufeff")


def build_extraction_instruction(prompts_dir: Path, max_terms: int) -> str:
    """Render the fixed term-extraction system instruction."""
    template = load_prompt(prompts_dir / EXTRACTION_PROMPT_FILE)
    return template.replace("<<MAX_TERMS>>", str(max(max_terms, 1))).strip()
