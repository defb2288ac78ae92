"""Hypothetical-answer expansion (HyDE).

An answer-shaped text tends to sit closer to answer-bearing passages in
embedding space than the bare question, so the generated answer is what
gets embedded for the vector search.
"""

from __future__ import annotations

import logging

from contextual_rag.llm.base import LLMProvider, strip_reasoning
from contextual_rag.prompts import HYPOTHETICAL_ANSWER_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class HypotheticalAnswerExpander:
    """Turns a question into a concise hypothetical answer."""

    def __init__(
        self,
        llm_provider: LLMProvider,
        system_prompt: str = HYPOTHETICAL_ANSWER_SYSTEM_PROMPT,
    ):
        self.llm_provider = llm_provider
        self.system_prompt = system_prompt

    def expand(self, question: str) -> str:
        """Return a hypothetical answer, or ``question`` itself on failure."""
        try:
            answer = strip_reasoning(
                self.llm_provider.generate(question, system=self.system_prompt) or ""
            )
        except Exception as exc:
            logger.warning("Hypothetical answer failed, using the question: %s", exc)
            return question

        if not answer:
            logger.warning("Empty hypothetical answer, using the question")
            return question
        return answer
