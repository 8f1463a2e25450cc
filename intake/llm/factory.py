"""
根据 settings.LLM_PROVIDER 返回 LLMService 实例（默认 "anthropic"）。
换供应商只改环境变量 LLM_PROVIDER。
"""

from django.conf import settings
from django.utils.module_loading import import_string

from .base import BaseLLMService

# 用路径字符串登记，按需 import，Django 启动时不加载 SDK
PROVIDERS = {
    "anthropic": "intake.llm.services.ClaudeService",
    "openai":    "intake.llm.services.OpenAIService",
}


def get_llm_service() -> BaseLLMService:
    """
    Raises:
        ValueError: LLM_PROVIDER 未知
    """
    provider = getattr(settings, "LLM_PROVIDER", "anthropic")
    path = PROVIDERS.get(provider)

    if path is None:
        raise ValueError(
            f"Unknown LLM_PROVIDER: {provider!r}. "
            f"Known providers: {sorted(PROVIDERS)}"
        )

    return import_string(path)()
