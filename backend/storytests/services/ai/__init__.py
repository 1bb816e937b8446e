"""
AI Services Package

This package contains the prompt builder, the generation service gateway
and the model output validator.
"""

from .openai_service import OpenAIService, ModelCompletion
from .prompt_manager import PromptManager, PromptPair
from .response_parser import ResponseParser

__all__ = [
    "OpenAIService",
    "ModelCompletion",
    "PromptManager",
    "PromptPair",
    "ResponseParser",
]
