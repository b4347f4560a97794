"""Error taxonomy for the prediction core.

Only :class:`WorkflowInputError`, :class:`NoDataAvailableError`,
:class:`AlertNotFoundError` and :class:`BookingNotFoundError` are meant to reach
callers.  Inference and best-effort store failures are recovered inside the
core.
"""

from __future__ import annotations


class AutoSentienceError(Exception):
    """Base class for all domain errors."""


class WorkflowInputError(AutoSentienceError):
    """Invalid caller input (missing vehicle_id, missing sensor data)."""


class NoDataAvailableError(AutoSentienceError):
    """A required read returned nothing (e.g. no sensor snapshot for a vehicle)."""


class AlertNotFoundError(AutoSentienceError):
    """Referenced alert does not exist."""


class InferenceError(AutoSentienceError):
    """The inference backend failed after exhausting its retry budget."""


class StoreError(AutoSentienceError):
    """A store read or write failed."""


class BookingNotFoundError(AutoSentienceError):
    """Referenced booking does not exist."""
