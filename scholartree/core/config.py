"""
configuration for scholartree.
all settings in one place, easily tunable.
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from enum import Enum


# structure-altering operations (expand, network regeneration) per search
MUTATION_LIMIT = 10


class ProviderKind(Enum):
    """which LLM backend answers the collaborator calls."""
    GEMINI = "gemini"
    OLLAMA = "ollama"


@dataclass
class LLMConfig:
    """LLM backend settings."""
    provider: ProviderKind = ProviderKind.GEMINI

    # gemini
    api_key: Optional[str] = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-2.5-flash"            # trees, expansions, network
    literature_model: str = "gemini-2.5-pro"   # literature lookup (with search)

    # ollama
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "qwen3:32b"

    # request settings
    timeout: float = 120.0
    temperature: float = 0.3
    max_tokens: int = 8192


@dataclass
class ExportConfig:
    """export settings."""
    output_dir: str = "output"
    image_margin: int = 50
    image_size: int = 800
    background: str = "#0f172a"  # slate-900


@dataclass
class ExplorerConfig:
    """master configuration for scholartree."""
    llm: LLMConfig = field(default_factory=LLMConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    mutation_limit: int = MUTATION_LIMIT

    @classmethod
    def default(cls) -> 'ExplorerConfig':
        """return default configuration."""
        return cls()

    @classmethod
    def from_env(cls) -> 'ExplorerConfig':
        """default configuration with overrides from environment variables."""
        config = cls()
        llm = config.llm

        llm.api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")

        provider = os.environ.get("SCHOLARTREE_PROVIDER")
        if provider:
            llm.provider = ProviderKind(provider.lower())

        model = os.environ.get("SCHOLARTREE_MODEL")
        if model:
            if llm.provider == ProviderKind.OLLAMA:
                llm.ollama_model = model
            else:
                llm.model = model

        literature_model = os.environ.get("SCHOLARTREE_LITERATURE_MODEL")
        if literature_model:
            llm.literature_model = literature_model

        ollama_url = os.environ.get("OLLAMA_BASE_URL")
        if ollama_url:
            llm.ollama_base_url = ollama_url

        export_dir = os.environ.get("SCHOLARTREE_EXPORT_DIR")
        if export_dir:
            config.export.output_dir = export_dir

        return config
