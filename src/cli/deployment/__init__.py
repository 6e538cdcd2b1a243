"""Stack deployment workflow.

This package contains the deployment pipeline and the pieces it is built
from:

- models: DeploymentRequest and TemplateReference
- approval: operator confirmation gate
- reporter: console rendering of progress and failures
- pipeline: StackDeployer, the ordered stage runner
"""

from .approval import ApprovalDecision, ApprovalGate, ApprovalState
from .models import DeploymentRequest, TemplateReference, build_request
from .pipeline import PipelineResult, StackDeployer
from .reporter import DeploymentReporter

__all__ = [
    "ApprovalDecision",
    "ApprovalGate",
    "ApprovalState",
    "DeploymentReporter",
    "DeploymentRequest",
    "PipelineResult",
    "StackDeployer",
    "TemplateReference",
    "build_request",
]
