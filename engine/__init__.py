"""
Peptide Protocol Engine - Core Engines

Pure, in-memory computations over records already loaded from storage:
- Protocol recommendation (constraint filter, scoring, selection)
- Template personalization
- Outcome analytics (metric summaries, trends, adherence, correlation)
"""

from .errors import NotFoundError
from .selection import select, personalize, suggest
from .reports import build_protocol_analysis, build_user_insights

__all__ = [
    "NotFoundError",
    "select",
    "personalize",
    "suggest",
    "build_protocol_analysis",
    "build_user_insights",
]
