# llm - model backends and the research collaborator contracts
from .provider import (
    LLMProvider, LLMResponse, GeminiProvider, OllamaProvider,
    build_provider, extract_json
)
from .collaborator import ResearchCollaborator

__all__ = [
    "LLMProvider", "LLMResponse", "GeminiProvider", "OllamaProvider",
    "build_provider", "extract_json", "ResearchCollaborator"
]
