"""Workflow use cases: matching, orchestration, manual runs and management."""

from autoflow.application.use_cases.workflows.manual_run import ManualRunService
from autoflow.application.use_cases.workflows.matcher import WorkflowMatcher
from autoflow.application.use_cases.workflows.orchestrator import (
    ExecutionOrchestrator,
)
from autoflow.application.use_cases.workflows.workflow_service import (
    WorkflowService,
)

__all__ = [
    "ExecutionOrchestrator",
    "ManualRunService",
    "WorkflowMatcher",
    "WorkflowService",
]
