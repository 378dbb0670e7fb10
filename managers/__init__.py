"""Manager classes for the 4o-image MCP Server"""

from managers.config_manager import ConfigManager, MissingCredentialError
from managers.generation_orchestrator import GenerationOrchestrator
from managers.task_poller import TaskPoller

__all__ = ["ConfigManager", "GenerationOrchestrator", "MissingCredentialError", "TaskPoller"]
