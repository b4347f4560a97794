from autosentience.workflow.orchestrator import (
    PLACEHOLDER_ALERT_ID,
    WorkflowAgents,
    WorkflowOrchestrator,
    execute_workflow,
)
from autosentience.workflow.schemas import WorkflowInput, WorkflowResult

__all__ = [
    "PLACEHOLDER_ALERT_ID",
    "WorkflowAgents",
    "WorkflowInput",
    "WorkflowOrchestrator",
    "WorkflowResult",
    "execute_workflow",
]
