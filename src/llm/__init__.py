"""
LLM integration for transcript analysis.
"""

from src.llm.llm_client import LLMClient, LLMResponse

__all__ = ['LLMClient', 'LLMResponse']
