"""
Prompt builder
Assembles the outbound prompt from the template, the ticket title and the filtered report
"""

import logging
import re
from pathlib import Path

from .prompts import REPORT_PLACEHOLDER, TITLE_PLACEHOLDER

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(f"{re.escape(TITLE_PLACEHOLDER)}|{re.escape(REPORT_PLACEHOLDER)}")


def build_prompt(template: str, ticket_title: str, report_content: str) -> str:
    """
    Substitute the ticket title and report into the template

    Each placeholder is substituted once; a missing placeholder is left alone.
    All curly braces are removed from the result so the prompt never reads as
    a format template downstream.

    Args:
        template: Prompt template containing the placeholders
        ticket_title: Ticket summary line
        report_content: Filtered report (JSON text)

    Returns:
        str: Final prompt
    """
    values = {TITLE_PLACEHOLDER: ticket_title, REPORT_PLACEHOLDER: report_content}
    seen = set()

    def substitute(match: re.Match) -> str:
        token = match.group(0)
        if token in seen:
            return token
        seen.add(token)
        return values[token]

    # One pass over the template, so substituted text is never scanned for placeholders
    prompt = PLACEHOLDER_PATTERN.sub(substitute, template)
    return prompt.replace("{", "").replace("}", "")


def write_debug_prompt(prompt: str, path: str) -> bool:
    """Persist the prompt for debugging; failures are logged and never raised"""
    try:
        Path(path).write_text(prompt, encoding="utf-8")
    except OSError as e:
        logger.warning(f"Could not write prompt debug file {path}: {e}")
        return False
    logger.debug(f"Prompt written to {path}")
    return True


__all__ = ["build_prompt", "write_debug_prompt"]
