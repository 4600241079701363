from __future__ import annotations

import json
from typing import Any, Mapping

from .vocabulary import Vocabulary

# ---------------------------------------------------------------------------
# Prompt fragments. Output structure is enforced through the JSON schema sent
# with each request; these texts only carry editorial instructions.
# ---------------------------------------------------------------------------

_ANALYSIS_ROLE = (
    "You are an expert acquisitions editor and publishing marketing specialist. "
    "You read manuscripts and prepare the metadata a publisher needs to catalogue and sell a book."
)

_ANALYSIS_TASK = (
    "Analyse the manuscript below and fill every field of the requested JSON object. "
    "Work in two passes: first understand the work (genre, themes, audience, voice), "
    "then select classifications strictly from the supplied controlled lists."
)

_ANALYSIS_GUIDELINES = (
    "1. title: the main title of the work. If no clear title can be identified, return \"TÍTULO NO ENCONTRADO\".\n"
    "2. foundSubtitle: the subtitle only if it appears verbatim in the text, otherwise null.\n"
    "3. subtitleSuggestions: when no subtitle is found, 20 persuasive suggestions; when one is found, [].\n"
    "4. authorName: the author's name. If it cannot be found, return \"Autor Desconocido\".\n"
    "5. authorBio: a 150-word author biography, serious and engaging, without qualifying adjectives. "
    "Use markdown italics for titles of works (e.g. *El Quijote*). "
    "If there is no information, return \"Sin información disponible del autor\".\n"
    "6. synopsis: a 230-280 word commercial synopsis, bold, intelligent and evocative. Mandatory restrictions:\n"
    "   - no imperative verbs addressed to the reader;\n"
    "   - no \"not [A], but [B]\" constructions;\n"
    "   - no cliché adjectives such as 'fascinating';\n"
    "   - markdown italics for titles of works.\n"
    "7. tags: choose between 4 and 6 entries from the TAG LIST that best identify the work.\n"
    "8. classifications: for each scheme (bisac, thema, ibic) give 2 main, 2 secondary and 2 related "
    "subjects, each with its code, its description and a short justification.\n"
    "9. citations: APA, MLA, Chicago, Harvard and Vancouver citations. Use the placeholders "
    "'[Editorial]', '[Año]' and '[Ciudad]' when data is missing. Use markdown italics for titles."
)

_CONTROLLED_LIST_RULE = (
    "CONTROLLED LISTS RULE: tags and classification codes are only valid if they appear "
    "exactly as written in the lists below. Any other value will be rejected."
)

_TRANSLATION_TASK = (
    "Translate only the values of the following JSON object from Spanish to English. "
    "Keep exactly the same keys. Markdown italics (*text*) must be preserved in the translation."
)


def build_analysis_prompt(text: str, vocabulary: Vocabulary, language: str = "Spanish") -> str:
    """
    Assemble the base analysis prompt: role, task, manuscript, field
    guidelines and the full controlled vocabularies.
    """
    return join_sections(
        f"ROLE: {_ANALYSIS_ROLE}",
        f"TASK: {_ANALYSIS_TASK}",
        f"LANGUAGE: write every free-text value (bio, synopsis, justifications, suggestions) in {language}.",
        section("MANUSCRIPT", f"---\n{text}\n---"),
        section("FIELD INSTRUCTIONS", _ANALYSIS_GUIDELINES),
        _CONTROLLED_LIST_RULE,
        _vocabulary_block(vocabulary),
    )


def build_translation_prompt(data: Mapping[str, Any]) -> str:
    payload = {
        "title": str(data.get("title", "") or ""),
        "authorName": str(data.get("authorName", "") or ""),
        "synopsis": str(data.get("synopsis", "") or ""),
        "authorBio": str(data.get("authorBio", "") or ""),
    }
    return join_sections(
        f"TASK: {_TRANSLATION_TASK}",
        section("Input JSON", json.dumps(payload, ensure_ascii=False)),
    )


def _vocabulary_block(vocabulary: Vocabulary) -> str:
    def listing(scheme: str) -> str:
        return "\n".join(f"{code}: {description}" for code, description in vocabulary.entries(scheme))

    return join_sections(
        section("TAG LIST", ", ".join(vocabulary.ordered_tags())),
        section("BISAC SUBJECTS", listing("bisac")),
        section("THEMA SUBJECTS", listing("thema")),
        section("IBIC SUBJECTS", listing("ibic")),
    )


def section(heading: str, body: str) -> str:
    """Wrap a block of text with a heading; empty bodies produce no section."""
    body = body.strip()
    return f"### {heading}\n{body}" if body else ""


def join_sections(*parts: str) -> str:
    return "\n\n".join(p for p in parts if p and p.strip())
