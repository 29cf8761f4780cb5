"""Static phase and ticker catalogs for document jobs.

Ordered phase lists are per job type. Ticker messages are generated on the
client only and never written to the store.
"""

from __future__ import annotations

from common.job_models import JobHighlight, JobType

PHASE_LABELS: dict[str, str] = {
    "validating": "Checking document",
    "parsing": "Parsing document",
    "extracting": "Extracting experience",
    "embeddings": "Generating embeddings",
    "synthesis": "Synthesizing claims",
    "reflection": "Reflecting identity",
    "evaluation": "Evaluating claims",
    "enriching": "Enriching job data",
    "researching": "Researching company",
}

RESUME_PHASES: list[str] = [
    "parsing",
    "extracting",
    "embeddings",
    "synthesis",
    "reflection",
    "evaluation",
]

STORY_PHASES: list[str] = [
    "validating",
    "extracting",
    "embeddings",
    "synthesis",
    "reflection",
    "evaluation",
]

OPPORTUNITY_PHASES: list[str] = [
    "enriching",
    "extracting",
    "embeddings",
    "researching",
]

PHASES_BY_JOB_TYPE: dict[JobType, list[str]] = {
    JobType.RESUME: RESUME_PHASES,
    JobType.STORY: STORY_PHASES,
    JobType.OPPORTUNITY: OPPORTUNITY_PHASES,
}

TICKER_MESSAGES: dict[str, list[str]] = {
    "validating": ["checking content...", "validating story..."],
    "parsing": ["reading document...", "extracting text...", "parsing pages..."],
    "extracting": [
        "reading your story...",
        "scanning achievements...",
        "parsing experience...",
        "finding skills...",
        "analyzing roles...",
        "extracting details...",
        "understanding context...",
        "identifying patterns...",
        "processing history...",
    ],
    "embeddings": [
        "generating vectors...",
        "processing semantics...",
        "encoding meaning...",
    ],
    "synthesis": [
        "analyzing patterns...",
        "connecting experiences...",
        "finding themes...",
        "mapping skills...",
        "building narrative...",
        "discovering strengths...",
        "processing achievements...",
        "linking evidence...",
        "synthesizing identity...",
        "evaluating expertise...",
        "recognizing talents...",
        "compiling insights...",
    ],
    "reflection": [
        "synthesizing identity...",
        "building profile...",
        "crafting narrative...",
    ],
    "evaluation": [
        "checking claim quality...",
        "verifying grounding...",
        "validating evidence...",
    ],
    "enriching": [
        "fetching job details...",
        "extracting metadata...",
        "parsing requirements...",
    ],
    "researching": [
        "researching company...",
        "gathering insights...",
        "analyzing market position...",
    ],
}


def format_highlight(highlight: JobHighlight) -> str:
    """Render a highlight for display based on its type."""
    if highlight.type == "found":
        return f"Found: {highlight.text}"
    if highlight.type == "created":
        return f"+ {highlight.text}"
    if highlight.type == "updated":
        return f"~ {highlight.text}"
    return highlight.text
