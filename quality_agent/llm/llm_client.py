"""
LLM Client for Quality Checker Agent
Provides the model gateway (OpenRouter, OpenAI-compatible) using LangChain
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import SystemMessage, HumanMessage
from langchain_openai import ChatOpenAI

from ..config.agent_config import AgentConfig, setup_langsmith
from .document_store import DocumentStore

logger = logging.getLogger(__name__)

CONTEXT_TOP_K = 5

CONTEXT_SYSTEM_MESSAGE = """You are a software quality reviewer.
Use the following project documentation as context when answering.

{context}"""


def message_text(content: Any) -> str:
    """Flatten a chat message content (string or content blocks) into text"""
    if isinstance(content, str):
        return content
    parts: List[str] = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and isinstance(block.get("text"), str):
            parts.append(block["text"])
    return "".join(parts)


class QualityLLMClient:
    """
    Model gateway for Quality Checker Agent
    One chat model per model identifier, all sharing one in-memory document store
    """

    def __init__(self,
                 config: AgentConfig,
                 document_store: Optional[DocumentStore] = None,
                 llm_factory: Optional[Callable[[str], BaseChatModel]] = None):
        """
        Initialize LLM client

        Args:
            config: Agent configuration
            document_store: Optional document store (a fresh one per run by default)
            llm_factory: Optional factory building a chat model for a model name
        """
        setup_langsmith()

        self.config = config
        self.document_store = document_store or DocumentStore()
        self._llm_factory = llm_factory or self._initialize_llm
        self._models: Dict[str, BaseChatModel] = {}

        logger.info(f"Initialized LLM client for gateway: {config.open_router_api_url}")

    def _initialize_llm(self, model_name: str) -> ChatOpenAI:
        """
        Initialize an OpenRouter model using the OpenAI-compatible interface

        Returns:
            ChatOpenAI: Configured chat model
        """
        if not self.config.open_router_api_key:
            raise ValueError("OPEN_ROUTER_API_KEY environment variable is required")

        return ChatOpenAI(
            model=model_name,
            api_key=self.config.open_router_api_key,
            base_url=self.config.open_router_api_url,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            max_retries=self.config.max_retries,
            timeout=self.config.request_timeout
        )

    def _get_llm(self, model_name: str) -> BaseChatModel:
        if model_name not in self._models:
            self._models[model_name] = self._llm_factory(model_name)
        return self._models[model_name]

    async def add_document(self, index_name: str, document: str) -> None:
        """Add a document to the named index used by generate()"""
        self.document_store.add_document(index_name, document)

    async def generate(self, model_name: str, index_name: str, prompt: str) -> str:
        """
        Generate a response grounded on the documents of an index

        Args:
            model_name: Model identifier known to the gateway
            index_name: Document index to retrieve context from
            prompt: User prompt

        Returns:
            str: Model response text
        """
        context = self.document_store.query(index_name, prompt, top_k=CONTEXT_TOP_K)
        messages = [
            SystemMessage(content=CONTEXT_SYSTEM_MESSAGE.format(context="\n\n".join(context))),
            HumanMessage(content=prompt)
        ]
        response = await self._get_llm(model_name).ainvoke(messages)
        return message_text(response.content)

    async def make_call_to_model(self, model_name: str, text: str, prompt: str) -> str:
        """
        Send a text to a model with a task prompt as system message

        Args:
            model_name: Model identifier known to the gateway
            text: Text the prompt is applied to
            prompt: Task prompt

        Returns:
            str: Model response text
        """
        messages = [SystemMessage(content=prompt), HumanMessage(content=text)]
        response = await self._get_llm(model_name).ainvoke(messages)
        return message_text(response.content)


def create_llm_client(config: AgentConfig) -> QualityLLMClient:
    """Factory function to create the LLM client"""
    return QualityLLMClient(config)


__all__ = ["QualityLLMClient", "create_llm_client", "message_text"]
