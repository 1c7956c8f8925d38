"""
Acceptance criteria extraction from ticket descriptions
"""

import re
from typing import List

# Gherkin scenarios, user stories, checklist items and numbered items, in this order
CRITERIA_PATTERNS = [
    re.compile(r"Given.*When.*Then.*", re.IGNORECASE),
    re.compile(r"As a.*I want.*So that.*", re.IGNORECASE),
    re.compile(r"- \[[ x]\].*", re.IGNORECASE),
    re.compile(r"\d+\..*"),
]


def extract_acceptance_criteria(description: str) -> List[str]:
    """
    Collect the description lines that read as acceptance criteria

    Each pattern matches within one line. A line matching several patterns is
    listed once per pattern, grouped by pattern.
    """
    criteria: List[str] = []
    for pattern in CRITERIA_PATTERNS:
        criteria.extend(match.strip() for match in pattern.findall(description or ""))
    return criteria


__all__ = ["CRITERIA_PATTERNS", "extract_acceptance_criteria"]
