from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TypedDict

from django.conf import settings
from langgraph.graph import END, START, StateGraph

from .corrections import build_correction_prompt
from .gateway import GenerationError
from .normalization import CodeSubstitute, normalize_result
from .schemas import ANALYSIS_SCHEMA
from .validation import ValidationResult, detect_invalid_codes
from .vocabulary import Vocabulary

logger = logging.getLogger(__name__)

ACCEPTED = "accepted"
EXHAUSTED = "exhausted"
FAILED = "failed"


class ClassificationState(TypedDict, total=False):
    base_prompt: str
    current_prompt: str
    attempt: int
    max_retries: int
    started_at: float
    candidate: Dict[str, Any]
    validation: ValidationResult
    history: List[ValidationResult]
    status: str
    result: Dict[str, Any]
    error: GenerationError


@dataclass
class LoopOutcome:
    """Tagged result of one classification loop: accepted, exhausted or failed."""

    status: str
    attempts: int
    result: Optional[Dict[str, Any]] = None
    validation: Optional[ValidationResult] = None
    history: List[ValidationResult] = field(default_factory=list)
    error: Optional[GenerationError] = None

    @property
    def accepted(self) -> bool:
        return self.status == ACCEPTED

    @property
    def exhausted(self) -> bool:
        return self.status == EXHAUSTED

    @property
    def failed(self) -> bool:
        return self.status == FAILED

    def report(self) -> Dict[str, Any]:
        return {
            "outcome": self.status,
            "attempts": self.attempts,
            "rejected": [item.to_dict() for item in self.history if not item.is_valid],
        }


class ClassificationLoop:
    """
    LangGraph state machine that asks the model for a classified analysis
    until every tag and code belongs to the controlled vocabularies.

    generate -> validate -> accept | correct -> generate | exhaust
    accept / exhaust -> normalize -> END

    A retry re-sends the base prompt plus one correction block describing the
    previous attempt's rejections. Normalization runs on both exits, so the
    caller never receives a code outside the vocabulary. A gateway failure
    ends the loop at once with a ``failed`` outcome.
    """

    def __init__(
        self,
        gateway: Any,
        vocabulary: Vocabulary,
        *,
        max_retries: int | None = None,
        schema: Dict[str, Any] | None = None,
        schema_name: str = "editorial_analysis",
        substitute: CodeSubstitute | None = None,
        budget_s: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.gateway = gateway
        self.vocabulary = vocabulary
        self.max_retries = int(
            max_retries if max_retries is not None else settings.EDITORIAL_CLASSIFICATION_MAX_RETRIES
        )
        self.schema = schema or ANALYSIS_SCHEMA
        self.schema_name = schema_name
        self.substitute = substitute
        self.budget_s = float(budget_s if budget_s is not None else settings.EDITORIAL_ANALYSIS_BUDGET_S)
        self._clock = clock
        self.graph = self._build_graph()

    def run(self, base_prompt: str, *, max_retries: int | None = None) -> LoopOutcome:
        limit = int(max_retries if max_retries is not None else self.max_retries)
        if limit < 1:
            raise ValueError("max_retries must be at least 1")

        state: ClassificationState = {
            "base_prompt": base_prompt,
            "current_prompt": base_prompt,
            "attempt": 0,
            "max_retries": limit,
            "started_at": self._clock(),
            "history": [],
        }
        final_state = self.graph.invoke(state, config={"recursion_limit": 3 * limit + 10})

        outcome = LoopOutcome(
            status=str(final_state.get("status", "")),
            attempts=int(final_state.get("attempt", 0)),
            result=final_state.get("result"),
            validation=final_state.get("validation"),
            history=list(final_state.get("history", [])),
            error=final_state.get("error"),
        )
        if outcome.status not in {ACCEPTED, EXHAUSTED, FAILED}:
            raise ValueError("Classification graph ended without a terminal status")
        logger.info("Classification loop finished: %s after %d attempt(s)", outcome.status, outcome.attempts)
        return outcome

    def _build_graph(self):
        graph = StateGraph(ClassificationState)
        graph.add_node("generate", self._node_generate)
        graph.add_node("validate", self._node_validate)
        graph.add_node("correct", self._node_correct)
        graph.add_node("accept", self._node_accept)
        graph.add_node("exhaust", self._node_exhaust)
        graph.add_node("normalize", self._node_normalize)

        graph.add_edge(START, "generate")
        graph.add_conditional_edges(
            "generate",
            self._route_generated,
            {"validate": "validate", "failed": END},
        )
        graph.add_conditional_edges(
            "validate",
            self._route_validated,
            {"accept": "accept", "correct": "correct", "exhaust": "exhaust"},
        )
        graph.add_edge("correct", "generate")
        graph.add_edge("accept", "normalize")
        graph.add_edge("exhaust", "normalize")
        graph.add_edge("normalize", END)
        return graph.compile()

    def _node_generate(self, state: ClassificationState) -> ClassificationState:
        attempt = int(state.get("attempt", 0)) + 1
        logger.info("Classification attempt %d/%d", attempt, int(state.get("max_retries", self.max_retries)))
        try:
            candidate = self.gateway.generate(
                state.get("current_prompt", ""),
                self.schema,
                schema_name=self.schema_name,
            )
        except GenerationError as exc:
            logger.warning("Generation failed on attempt %d", attempt, exc_info=True)
            return {"attempt": attempt, "status": FAILED, "error": exc}
        return {"attempt": attempt, "candidate": candidate}

    def _route_generated(self, state: ClassificationState) -> str:
        return "failed" if state.get("status") == FAILED else "validate"

    def _node_validate(self, state: ClassificationState) -> ClassificationState:
        validation = detect_invalid_codes(state.get("candidate", {}), self.vocabulary)
        if not validation.is_valid:
            logger.warning(
                "Attempt %d rejected: tags=%s bisac=%s thema=%s ibic=%s",
                int(state.get("attempt", 0)),
                list(validation.invalid_tags),
                list(validation.invalid_bisac),
                list(validation.invalid_thema),
                list(validation.invalid_ibic),
            )
        history = list(state.get("history", []))
        history.append(validation)
        return {"validation": validation, "history": history}

    def _route_validated(self, state: ClassificationState) -> str:
        validation = state.get("validation")
        if validation is not None and validation.is_valid:
            return "accept"
        if int(state.get("attempt", 0)) >= int(state.get("max_retries", self.max_retries)):
            return "exhaust"
        if self._budget_spent(state):
            logger.warning("Analysis time budget of %.0fs spent; no further attempts", self.budget_s)
            return "exhaust"
        return "correct"

    def _node_correct(self, state: ClassificationState) -> ClassificationState:
        base_prompt = state.get("base_prompt", "")
        validation = state.get("validation") or ValidationResult()
        return {"current_prompt": base_prompt + build_correction_prompt(validation)}

    def _node_accept(self, _state: ClassificationState) -> ClassificationState:
        return {"status": ACCEPTED}

    def _node_exhaust(self, state: ClassificationState) -> ClassificationState:
        validation = state.get("validation")
        logger.warning(
            "Classification still invalid after %d attempt(s); dropping %d rejected value(s)",
            int(state.get("attempt", 0)),
            validation.rejected_count() if validation is not None else 0,
        )
        return {"status": EXHAUSTED}

    def _node_normalize(self, state: ClassificationState) -> ClassificationState:
        result = normalize_result(state.get("candidate", {}), self.vocabulary, self.substitute)
        return {"result": result}

    def _budget_spent(self, state: ClassificationState) -> bool:
        if self.budget_s <= 0:
            return False
        started_at = state.get("started_at")
        if started_at is None:
            return False
        return self._clock() - float(started_at) >= self.budget_s
