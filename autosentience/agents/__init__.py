"""LLM-backed maintenance agents.

Each agent wraps exactly one inference call and a deterministic fallback;
``await agent.run(input)`` always returns a valid output model.
"""

from autosentience.agents.base import BaseAgent
from autosentience.agents.data_analysis import DataAnalysisAgent
from autosentience.agents.diagnosis import DiagnosisAgent
from autosentience.agents.engagement import EngagementAgent
from autosentience.agents.feedback import FeedbackAgent
from autosentience.agents.manufacturing import ManufacturingAgent
from autosentience.agents.master import MasterAgent
from autosentience.agents.rca import RCAAgent
from autosentience.agents.scheduling import SchedulingAgent
from autosentience.agents.ueba import UEBAAgent

__all__ = [
    "BaseAgent",
    "DataAnalysisAgent",
    "DiagnosisAgent",
    "EngagementAgent",
    "FeedbackAgent",
    "ManufacturingAgent",
    "MasterAgent",
    "RCAAgent",
    "SchedulingAgent",
    "UEBAAgent",
]
