"""
具体 LLM 实现。

  anthropic — ClaudeService   环境变量 ANTHROPIC_API_KEY，模型可用 ANTHROPIC_MODEL 覆盖
  openai    — OpenAIService   环境变量 OPENAI_API_KEY，模型可用 OPENAI_MODEL 覆盖
"""

import logging
import os

from .base import BaseLLMService
from .types import LLMResponse

logger = logging.getLogger(__name__)


class ClaudeService(BaseLLMService):

    DEFAULT_MODEL = "claude-sonnet-4-20250514"

    def complete(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        import anthropic

        api_key = os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY is not set")

        model = os.getenv("ANTHROPIC_MODEL", self.DEFAULT_MODEL)
        client = anthropic.Anthropic(api_key=api_key, timeout=self.timeout)

        logger.debug("Calling Anthropic model=%s prompt_chars=%d", model, len(user_prompt))
        response = client.messages.create(
            model=model,
            max_tokens=self.max_tokens,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )

        text = "".join(block.text for block in response.content if block.type == "text")
        return LLMResponse(
            content=text,
            model=model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )


class OpenAIService(BaseLLMService):

    DEFAULT_MODEL = "gpt-4o"

    def complete(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        import openai

        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY is not set")

        model = os.getenv("OPENAI_MODEL", self.DEFAULT_MODEL)
        client = openai.OpenAI(api_key=api_key, timeout=self.timeout)

        logger.debug("Calling OpenAI model=%s prompt_chars=%d", model, len(user_prompt))
        response = client.chat.completions.create(
            model=model,
            max_tokens=self.max_tokens,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user",   "content": user_prompt},
            ],
        )

        usage = response.usage
        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )
