from __future__ import annotations

from typing import List, Sequence, Tuple

from .validation import ValidationResult

_CATEGORIES: Tuple[Tuple[str, str, str], ...] = (
    ("invalid_tags", "TAGS", "TAG LIST"),
    ("invalid_bisac", "BISAC CODES", "BISAC SUBJECTS list"),
    ("invalid_thema", "THEMA CODES", "THEMA SUBJECTS list"),
    ("invalid_ibic", "IBIC CODES", "IBIC SUBJECTS list"),
)

_HEADER = (
    "CORRECTION REQUIRED: your previous answer used values that do not exist in the "
    "controlled lists supplied above. They were rejected."
)

_FOOTER = (
    "Return the complete JSON object again. Every tag and every classification code must be "
    "copied exactly from the lists supplied above; do not invent, shorten or alter codes."
)


def build_correction_prompt(validation: ValidationResult) -> str:
    """
    Corrective instructions listing every rejected value, one labeled block
    per category with rejections. The text is appended to the base prompt
    for the next attempt.
    """
    blocks: List[str] = []
    for attr, label, source in _CATEGORIES:
        rejected = getattr(validation, attr)
        if rejected:
            blocks.append(_block(label, source, rejected))
    if not blocks:
        return ""
    return "\n\n" + "\n\n".join([_HEADER, *blocks, _FOOTER]) + "\n"


def _block(label: str, source: str, rejected: Sequence[str]) -> str:
    values = "\n".join(f'- "{value}"' for value in rejected)
    return (
        f"INVALID {label} ({len(rejected)}):\n{values}\n"
        f"Replace each of these with entries taken only from the {source}."
    )
