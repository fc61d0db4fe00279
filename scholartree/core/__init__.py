from .models import (
    NodeLabel, Paper, KeywordItem, TreeNode, Forest,
    NetworkNode, NetworkEdge, NetworkData, CollectedPaper, SessionSnapshot
)
from .config import ExplorerConfig, LLMConfig, ExportConfig, ProviderKind, MUTATION_LIMIT
from .errors import (
    ExplorerError, ValidationError, BudgetExceededError,
    CollaboratorError, ProviderError
)
from .logs import setup_logging
