"""
LLM package for Quality Checker Agent
"""

from .document_store import DocumentStore
from .llm_client import (
    QualityLLMClient,
    create_llm_client,
    message_text
)

__all__ = [
    "DocumentStore",
    "QualityLLMClient",
    "create_llm_client",
    "message_text"
]
