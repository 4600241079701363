from __future__ import annotations

from typing import Any, Dict, List, Optional, TypedDict


class ClassificationItem(TypedDict):
    code: str
    description: str
    justification: str


class SubjectClassification(TypedDict):
    main: List[ClassificationItem]
    secondary: List[ClassificationItem]
    related: List[ClassificationItem]


class Classifications(TypedDict):
    bisac: SubjectClassification
    thema: SubjectClassification
    ibic: SubjectClassification


class Citations(TypedDict):
    apa: str
    mla: str
    chicago: str
    harvard: str
    vancouver: str


class CitationInfo(TypedDict, total=False):
    publisher: str
    year: str
    city: str


class AnalysisResult(TypedDict, total=False):
    title: str
    foundSubtitle: Optional[str]
    subtitleSuggestions: List[str]
    authorName: str
    authorBio: str
    synopsis: str
    wordCount: int
    tags: List[str]
    classifications: Classifications
    citations: Citations
    rawText: str
    classificationReport: Dict[str, Any]


class TranslatedResult(TypedDict):
    title: str
    authorName: str
    synopsis: str
    authorBio: str


# ---------------------------------------------------------------------------
# Strict JSON schemas handed to the generation backend. Every object lists all
# of its properties as required and forbids extras, as strict structured
# output demands.
# ---------------------------------------------------------------------------

def _string(description: str = "") -> Dict[str, Any]:
    out: Dict[str, Any] = {"type": "string"}
    if description:
        out["description"] = description
    return out


def _string_array(description: str = "") -> Dict[str, Any]:
    out: Dict[str, Any] = {"type": "array", "items": {"type": "string"}}
    if description:
        out["description"] = description
    return out


def strict_object(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties.keys()),
        "additionalProperties": False,
    }


CLASSIFICATION_ITEM_SCHEMA = strict_object({
    "code": _string(),
    "description": _string(),
    "justification": _string(),
})

SUBJECT_CLASSIFICATION_SCHEMA = strict_object({
    "main": {"type": "array", "items": CLASSIFICATION_ITEM_SCHEMA},
    "secondary": {"type": "array", "items": CLASSIFICATION_ITEM_SCHEMA},
    "related": {"type": "array", "items": CLASSIFICATION_ITEM_SCHEMA},
})

CITATIONS_SCHEMA = strict_object({
    "apa": _string(),
    "mla": _string(),
    "chicago": _string(),
    "harvard": _string(),
    "vancouver": _string(),
})

ANALYSIS_SCHEMA = strict_object({
    "title": _string("Main title of the work."),
    "foundSubtitle": {
        "type": ["string", "null"],
        "description": "Subtitle found verbatim in the text, or null when there is none.",
    },
    "subtitleSuggestions": _string_array("20 suggested subtitles when none is found, otherwise empty."),
    "authorName": _string("Full name of the author."),
    "authorBio": _string("150-word author biography."),
    "synopsis": _string("Commercial synopsis of the work."),
    "tags": _string_array("4 to 6 tags taken from the supplied tag list."),
    "classifications": strict_object({
        "bisac": SUBJECT_CLASSIFICATION_SCHEMA,
        "thema": SUBJECT_CLASSIFICATION_SCHEMA,
        "ibic": SUBJECT_CLASSIFICATION_SCHEMA,
    }),
    "citations": CITATIONS_SCHEMA,
})

TRANSLATION_SCHEMA = strict_object({
    "title": _string(),
    "authorName": _string(),
    "synopsis": _string(),
    "authorBio": _string(),
})
