"""
Prompts for Quality Checker workflow
"""

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

TITLE_PLACEHOLDER = "##PLACEHOLDER##"
REPORT_PLACEHOLDER = "##REPORT##"

# Identifies this agent's comment on the pull request
COMMENT_MARKER = "Quality Checker Overview"


class QualityCheckerPrompts:
    """Collection of prompts for the quality checker workflow"""

    @staticmethod
    def user_prompt_template() -> str:
        """Default quality-assessment prompt; both placeholders are substituted once"""
        return f"""You are reviewing the unit tests written for a ticket.

**Ticket**: {TITLE_PLACEHOLDER}

**Recorded test cases per file** (JSON, file name -> test descriptions):
{REPORT_PLACEHOLDER}

Using the project documentation provided as context:
1. List the requirements of the ticket that the recorded test cases cover.
2. List the requirements, edge cases and error scenarios that are NOT covered.
3. Point out test cases that look redundant or unrelated to the ticket.
4. Suggest concrete additional test cases, grouped by file.
5. Give an overall quality score from 0 to 10 with a one-paragraph justification.

Answer in markdown."""

    @staticmethod
    def summarize_prompt() -> str:
        """Prompt turning one verbose assessment into the structured summary"""
        return """You will receive a test quality assessment written by a reviewer.
Summarize it for a pull request comment.

Respond ONLY with a JSON object of this exact shape and nothing else:
{"summary": "<two or three sentences on coverage and the most important gaps>", "score": <number from 0 to 10>}"""

    @staticmethod
    def summary_header(site_url: str) -> str:
        """Header every pull request comment starts with"""
        site_url = site_url.rstrip("/")
        return (
            f"[![Jira]({site_url}/favicon.ico)]({site_url}/) \n"
            f"## {COMMENT_MARKER}"
        )


def load_prompt(path: Optional[str], default: str) -> str:
    """
    Read a prompt template from a file, falling back to the packaged default

    Args:
        path: Optional template path
        default: Template used when no path is configured
    """
    if not path:
        return default
    logger.info(f"Reading prompt template from {path}")
    return Path(path).read_text(encoding="utf-8")


__all__ = [
    "COMMENT_MARKER",
    "QualityCheckerPrompts",
    "REPORT_PLACEHOLDER",
    "TITLE_PLACEHOLDER",
    "load_prompt",
]
