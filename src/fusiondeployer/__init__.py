"""
fusiondeployer - CI deployment orchestrator for page builder bundles
"""

__version__ = "1.0.0"

from .core import DeploymentOrchestrator
from .errors import DeployerError
from .models import RunContext, TerminationResult

__all__ = ["DeploymentOrchestrator", "DeployerError", "RunContext", "TerminationResult"]
