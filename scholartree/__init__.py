"""
scholartree - explore a research topic as a tree of AI-generated keywords.
"""

from .core.config import ExplorerConfig, MUTATION_LIMIT
from .core.models import TreeNode, Paper, NetworkData, NetworkEdge, CollectedPaper, NodeLabel
from .core.errors import ExplorerError, ValidationError, BudgetExceededError, CollaboratorError
from .tree import apply_patch, MutationBudget
from .llm import ResearchCollaborator, GeminiProvider, OllamaProvider
from .session import SessionOrchestrator, SessionState

__version__ = "0.1.0"

__all__ = [
    "ExplorerConfig",
    "MUTATION_LIMIT",
    "TreeNode",
    "Paper",
    "NetworkData",
    "NetworkEdge",
    "CollectedPaper",
    "NodeLabel",
    "ExplorerError",
    "ValidationError",
    "BudgetExceededError",
    "CollaboratorError",
    "apply_patch",
    "MutationBudget",
    "ResearchCollaborator",
    "GeminiProvider",
    "OllamaProvider",
    "SessionOrchestrator",
    "SessionState"
]
