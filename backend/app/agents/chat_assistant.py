"""Clinical AI analyst: answers questions about the current wound records."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from app.schemas.report import ChatTurn, WoundReport
from app.services.resolver import classify_stage

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
ROLE
You are a wound care clinical analyst supporting nurses who track pressure injuries.

RULES
1) Use ONLY the wound records listed below. Do not invent patients or measurements.
2) Measurements are weekly L x W x D in cm; a shrinking volume means healing.
3) If the records cannot answer the question, say so briefly.
4) Keep answers short and clinical. Plain text, no markdown tables."""

_GENERATION_CONFIG = {
    "temperature": 0.3,
    "top_p": 0.9,
    "max_output_tokens": 1024,
}


class AssistantError(Exception):
    """The upstream model call failed or returned nothing usable."""


def format_record_line(report: WoundReport) -> str:
    stage = "non-staged" if report.is_no_stage else (report.type_stage or "unspecified")
    weeks = ", ".join(f"W{i + 1}={w or '-'}" for i, w in enumerate(report.weeks))
    return (
        f"- {report.patient_name} (room {report.room_no}, {report.fac_hosp or 'facility n/a'}): "
        f"site={report.site}; stage={stage}; {weeks}; treatment={report.current_treatment or '-'}"
    )


def build_context(reports: Sequence[WoundReport]) -> str:
    """Serialize the resolved records into the prompt context block."""
    if not reports:
        return f"{SYSTEM_PROMPT}\n\nWOUND RECORDS\n(no records on file)"
    lines = [format_record_line(r) for r in reports]
    return f"{SYSTEM_PROMPT}\n\nWOUND RECORDS ({len(reports)})\n" + "\n".join(lines)


class ChatAssistant:
    """Thin wrapper around a Gemini chat session."""

    def __init__(self, model_name: str, api_key: str, *, mock: bool = False) -> None:
        self.model_name = model_name
        self.api_key = api_key
        self.mock = mock
        self._model: Any = None

    @property
    def ready(self) -> bool:
        return self.mock or self._model is not None

    def load(self) -> None:
        if self.mock:
            logger.info("Chat assistant running in MOCK mode.")
            return
        if not self.api_key:
            logger.warning("No Gemini API key configured; AI assistant disabled.")
            return
        import google.generativeai as genai

        genai.configure(api_key=self.api_key)
        self._model = genai.GenerativeModel(
            self.model_name, generation_config=_GENERATION_CONFIG,
        )
        logger.info("Chat assistant ready (model=%s).", self.model_name)

    def ask(
        self,
        question: str,
        reports: Sequence[WoundReport],
        history: Sequence[ChatTurn] | None = None,
    ) -> str:
        """Answer *question* grounded on the resolved *reports*."""
        if self.mock:
            return self._mock_reply(question, reports)
        if self._model is None:
            raise AssistantError("Assistant not loaded.")

        contents: list[dict[str, Any]] = [
            {"role": "user", "parts": [build_context(reports)]},
            {"role": "model", "parts": ["Understood. Ask me about these wound records."]},
        ]
        for turn in history or []:
            contents.append({"role": turn.role, "parts": [turn.text]})
        contents.append({"role": "user", "parts": [question]})

        try:
            resp = self._model.generate_content(contents)
            text = (resp.text or "").strip()
        except Exception as exc:
            logger.exception("Gemini request failed")
            raise AssistantError(f"AI request failed: {exc}") from exc
        if not text:
            raise AssistantError("AI returned an empty response.")
        return text

    @staticmethod
    def _mock_reply(question: str, reports: Sequence[WoundReport]) -> str:
        if not reports:
            return "There are no wound records on file to analyze."
        staged = sum(1 for r in reports if classify_stage(r) != "none")
        return (
            f"Reviewed {len(reports)} active wound records "
            f"({staged} staged pressure injuries, {len(reports) - staged} non-staged). "
            f"Question noted: {question.strip()}"
        )
