"""Query-side helpers — message gating and hypothetical-answer expansion."""

from contextual_rag.query.expander import HypotheticalAnswerExpander
from contextual_rag.query.gate import MessageKind, QueryGate

__all__ = ["HypotheticalAnswerExpander", "MessageKind", "QueryGate"]
