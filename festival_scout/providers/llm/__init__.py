"""LLM provider adapters.

Concrete implementations of ILLMProvider (festival_scout/interfaces/llm_provider.py):
    - OpenAILLMProvider    -- gpt-4o-mini, or any OpenAI-compatible API
    - AnthropicLLMProvider -- Claude via the Messages API

main.py picks the first provider with a configured API key.
"""

from festival_scout.providers.llm.anthropic_provider import AnthropicLLMProvider
from festival_scout.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OpenAILLMProvider"]
