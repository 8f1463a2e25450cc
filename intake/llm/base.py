"""
BaseLLMService — Care Plan 生成用的 LLM 抽象。

新增供应商：继承 BaseLLMService，实现 complete()，在 factory.py 注册。
max_tokens / timeout 统一从 settings 读取，子类不要各自硬编码。
"""

from abc import ABC, abstractmethod

from django.conf import settings

from .types import LLMResponse


class BaseLLMService(ABC):

    def __init__(self, max_tokens: int | None = None, timeout: float | None = None):
        self.max_tokens = max_tokens or getattr(settings, "CARE_PLAN_MAX_TOKENS", 4096)
        self.timeout = timeout or getattr(settings, "LLM_TIMEOUT_SECONDS", 60)

    @abstractmethod
    def complete(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        """
        调用 LLM，返回 LLMResponse。

        Raises:
            Exception: API 调用失败时直接抛出，由 tasks.py 的重试机制处理
        """
