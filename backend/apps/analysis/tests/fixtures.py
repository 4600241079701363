from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, List

from apps.analysis.services.vocabulary import Vocabulary


def small_vocabulary() -> Vocabulary:
    return Vocabulary.from_entries(
        tags=["novela", "thriller"],
        bisac=[{"code": "FIC000000", "description": "Fiction / General"}],
        thema=[
            {"code": "FB", "description": "Fiction: general and literary"},
            {"code": "FH", "description": "Thriller / suspense fiction"},
        ],
        ibic=[{"code": "FA", "description": "Modern & contemporary fiction (post c 1945)"}],
    )


def item(code: str, description: str = "model text", justification: str = "because") -> Dict[str, str]:
    return {"code": code, "description": description, "justification": justification}


def subject(main: List[Dict[str, str]] | None = None,
            secondary: List[Dict[str, str]] | None = None,
            related: List[Dict[str, str]] | None = None) -> Dict[str, Any]:
    return {"main": main or [], "secondary": secondary or [], "related": related or []}


def valid_candidate() -> Dict[str, Any]:
    return {
        "title": "La casa del faro",
        "foundSubtitle": None,
        "subtitleSuggestions": ["Una novela del norte"],
        "authorName": "Ana Ruiz",
        "authorBio": "Ana Ruiz escribe.",
        "synopsis": "Una mujer vuelve al faro.",
        "tags": ["novela", "thriller"],
        "classifications": {
            "bisac": subject(main=[item("FIC000000", "Fiction / General")]),
            "thema": subject(main=[item("FB", "Fiction: general and literary")], secondary=[item("FH", "Thriller / suspense fiction")]),
            "ibic": subject(related=[item("FA", "Modern & contemporary fiction (post c 1945)")]),
        },
        "citations": {
            "apa": "Ruiz, A. ([Año]). *La casa del faro*. [Editorial].",
            "mla": "Ruiz, Ana. *La casa del faro*. [Editorial], [Año].",
            "chicago": "Ruiz, Ana. *La casa del faro*. [Ciudad]: [Editorial], [Año].",
            "harvard": "Ruiz, A. ([Año]). *La casa del faro*. [Ciudad]: [Editorial].",
            "vancouver": "Ruiz A. La casa del faro. [Ciudad]: [Editorial]; [Año].",
        },
    }


def candidate_with_invalid_tag() -> Dict[str, Any]:
    candidate = valid_candidate()
    candidate["tags"] = ["novela", "poesía"]
    return candidate


def messy_candidate() -> Dict[str, Any]:
    candidate = valid_candidate()
    candidate["tags"] = ["poesía", "novela", "ensayo", "thriller"]
    candidate["classifications"] = {
        "bisac": subject(
            main=[item("FIC999999", "Fake", "x"), item("FIC000000", "Wrong text", "y")],
            related=[item("ZZZ000000")],
        ),
        "thema": subject(secondary=[item("FH", "thriller-ish"), item("FXQ")]),
        "ibic": subject(main=[item("FA")], related=[item("fa")]),
    }
    return candidate


class FakeGateway:
    """Returns queued payloads in order; repeats the last one when the queue runs dry."""

    def __init__(self, *payloads: Any) -> None:
        self.payloads = list(payloads)
        self.prompts: List[str] = []
        self.calls = 0

    def generate(self, prompt, schema, *, schema_name="result", system_prompt=None):
        self.calls += 1
        self.prompts.append(prompt)
        index = min(self.calls - 1, len(self.payloads) - 1)
        payload = self.payloads[index]
        if isinstance(payload, Exception):
            raise payload
        return deepcopy(payload)
