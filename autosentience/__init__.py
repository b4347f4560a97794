"""AutoSentience -- vehicle predictive-maintenance backend.

Screens sensor snapshots with deterministic threshold rules and escalates
violations through a chain of LLM-backed agents (diagnosis, engagement,
scheduling, UEBA, feedback, manufacturing insight).  Every agent has a
deterministic fallback so the workflow stays live when the model backend
is unavailable.
"""

__version__ = "0.1.0"
