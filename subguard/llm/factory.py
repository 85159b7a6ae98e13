"""Chat model construction for the optional explanation path."""

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from subguard.config import LLMProvider, settings
from subguard.exceptions import AppError


class LLMFactory:
    @staticmethod
    def is_configured(provider: str | None = None) -> bool:
        """True when the provider has a credential; no credential means template-only mode."""
        match provider or settings.llm_provider:
            case LLMProvider.OPENAI:
                return bool(settings.openai_api_key)
            case LLMProvider.ANTHROPIC:
                return bool(settings.anthropic_api_key)
            case _:
                return False

    @staticmethod
    def create(
        provider: str | None = None,
        model: str | None = None,
        **kwargs: object,
    ) -> BaseChatModel:
        provider = provider or settings.llm_provider
        model = model or settings.llm_model
        kwargs.setdefault("temperature", settings.llm_temperature)
        kwargs.setdefault("timeout", settings.llm_timeout_seconds)
        kwargs.setdefault("max_retries", 1)

        match provider:
            case LLMProvider.OPENAI:
                if not settings.openai_api_key:
                    raise AppError("OpenAI API key is not configured", code="LLM_CONFIG_ERROR")
                return ChatOpenAI(
                    model=model,
                    api_key=settings.openai_api_key,  # type: ignore[arg-type]
                    **kwargs,  # type: ignore[arg-type]
                )

            case LLMProvider.ANTHROPIC:
                if not settings.anthropic_api_key:
                    raise AppError("Anthropic API key is not configured", code="LLM_CONFIG_ERROR")
                return ChatAnthropic(
                    model=model,  # type: ignore[call-arg]
                    api_key=settings.anthropic_api_key,  # type: ignore[arg-type]
                    **kwargs,  # type: ignore[arg-type]
                )

            case _:
                raise AppError(f"Unknown LLM provider: '{provider}'", code="LLM_CONFIG_ERROR")
