"""
LLM 层的标准响应结构。

所有 LLMService.complete() 都返回 LLMResponse；
tasks.py 只认识这个格式，不知道背后是哪家 LLM。
"""

from dataclasses import dataclass


@dataclass
class LLMResponse:
    content: str             # 生成的 Care Plan 文本
    model: str               # 实际使用的模型名，写入 CarePlan.llm_model
    input_tokens: int = 0
    output_tokens: int = 0
