"""Prompt templates for context generation, query gating, expansion and assembly."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Ingestion: situating context for a chunk
# ---------------------------------------------------------------------------

CONTEXT_SYSTEM_PROMPT = "Generate concise context for the chunk based on the document."

CONTEXT_PROMPT_TEMPLATE = """\
<document>
{document}
</document>
Here is the chunk we want to situate within the whole document
<chunk>
{chunk}
</chunk>
Please give a short succinct context (one or two sentences) to situate this \
chunk within the overall document for the purposes of improving search \
retrieval of the chunk. Do not summarize the chunk. Answer only with the \
succinct context and nothing else.
"""

# ---------------------------------------------------------------------------
# Query path
# ---------------------------------------------------------------------------

CLASSIFY_SYSTEM_PROMPT = "Classify the user message as a question, statement, or other"

HYPOTHETICAL_ANSWER_SYSTEM_PROMPT = "Answer the user's question concisely:"

# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

RELEVANT_INFORMATION_HEADER = (
    "Use the following relevant information to answer the question. "
    "Base the answer only on this information."
)

RELEVANT_INFORMATION_TEMPLATE = """\
<relevant_information>
{header}

{context}
</relevant_information>"""


def build_context_prompt(document: str, chunk: str) -> str:
    """Build the prompt asking for a chunk's situating context."""
    return CONTEXT_PROMPT_TEMPLATE.format(document=document, chunk=chunk)


def format_relevant_information(
    passages: list[str],
    header: str = RELEVANT_INFORMATION_HEADER,
) -> str:
    """Join ranked passages into one delimited context section.

    Passages keep their rank order and are separated by blank lines.
    """
    return RELEVANT_INFORMATION_TEMPLATE.format(
        header=header,
        context="\n\n".join(passages),
    )
