from langchain_openai import ChatOpenAI
from langchain_anthropic import ChatAnthropic
from langchain_ollama import ChatOllama
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from content_agent.config import settings
from content_agent.constants import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE
from content_agent.services.errors import ProviderError
from typing import Literal, Optional, Protocol
import logging

logger = logging.getLogger(__name__)

# Module-level cache for LLM clients (keyed by provider and generation options)
_llm_cache: dict[tuple, BaseChatModel] = {}


def _create_llm(provider: str, model: Optional[str], temperature: float, max_tokens: int) -> BaseChatModel:
    """Internal function to create a new LLM instance."""
    if provider == "openai":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required when using OpenAI")
        model = model or settings.openai_model
        logger.debug(f"Creating ChatOpenAI instance (model: {model})")
        return ChatOpenAI(
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            api_key=settings.openai_api_key,
        )
    elif provider == "anthropic":
        if not settings.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY is required when using Anthropic")
        model = model or settings.anthropic_model
        logger.debug(f"Creating ChatAnthropic instance (model: {model})")
        return ChatAnthropic(
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            api_key=settings.anthropic_api_key,
        )
    elif provider == "ollama":
        model = model or settings.ollama_model
        logger.debug(f"Creating ChatOllama instance (model: {model}, base_url: {settings.ollama_base_url})")
        return ChatOllama(
            model=model,
            base_url=settings.ollama_base_url,
            temperature=temperature,
            num_predict=max_tokens,
        )
    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")


def get_llm(
    provider: Optional[Literal["openai", "anthropic", "ollama"]] = None,
    *,
    model: Optional[str] = None,
    temperature: float = DEFAULT_TEMPERATURE,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> BaseChatModel:
    """
    Factory function to get the configured LLM provider.
    Caches instances by provider and options to avoid creating new clients on every call.

    Args:
        provider: Optional LLM provider to use. If None, uses the default from settings.
                  Options: "openai", "anthropic", "ollama"
        model: Model name; None uses the provider's configured default.

    Returns:
        BaseChatModel instance (ChatOpenAI, ChatAnthropic, or ChatOllama)
    """
    key = (provider or settings.llm_provider, model or None, temperature, max_tokens)

    if key not in _llm_cache:
        _llm_cache[key] = _create_llm(*key)

    return _llm_cache[key]


def to_langchain_messages(messages: list[dict]) -> list[BaseMessage]:
    """Convert ``{"role", "content"}`` dicts into LangChain message objects."""
    converted: list[BaseMessage] = []
    for message in messages:
        role = message.get("role")
        content = message.get("content", "")
        if role == "system":
            converted.append(SystemMessage(content=content))
        elif role == "assistant":
            converted.append(AIMessage(content=content))
        elif role == "user":
            converted.append(HumanMessage(content=content))
        else:
            raise ValueError(f"Unsupported message role: {role}")
    return converted


def _completion_text(content) -> str:
    # Anthropic (and some OpenAI responses) return a list of content blocks
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class GenerationProvider(Protocol):
    async def generate(
        self,
        messages: list[dict],
        *,
        model: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> str:
        ...


class LangChainGenerationProvider:
    """Generation provider backed by a LangChain chat model.

    Pass ``llm`` to pin a specific chat model; otherwise one is taken from
    :func:`get_llm` for each distinct set of generation options.
    """

    def __init__(
        self,
        provider: Optional[Literal["openai", "anthropic", "ollama"]] = None,
        llm: Optional[BaseChatModel] = None,
    ):
        self.provider = provider
        self._llm = llm

    async def generate(
        self,
        messages: list[dict],
        *,
        model: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> str:
        try:
            llm = self._llm or get_llm(
                self.provider, model=model, temperature=temperature, max_tokens=max_tokens
            )
            response = await llm.ainvoke(to_langchain_messages(messages))
        except Exception as e:
            raise ProviderError(f"LLM request failed: {e}") from e

        text = _completion_text(response.content)
        if not text.strip():
            raise ProviderError("LLM returned an empty completion")
        return text
