"""Error taxonomy shared by the planners, the oracle adapter and the API."""

from __future__ import annotations


class PlanningError(Exception):
    """Base class for planning failures."""


class DataQualityError(PlanningError):
    """A stop that cannot take part in clustering.

    Instances are collected as warnings on the planning result rather than
    raised to the caller.
    """

    def __init__(self, stop_id: str, reason: str) -> None:
        super().__init__(f"Stop '{stop_id}': {reason}")
        self.stop_id = stop_id
        self.reason = reason

    def to_dict(self) -> dict[str, str]:
        return {"stop_id": self.stop_id, "reason": self.reason}


class ConfigurationError(PlanningError, ValueError):
    """The planning call cannot run with the supplied days or technicians."""


class OracleError(PlanningError):
    """Base class for suggestion oracle failures. Never reaches the caller."""


class OracleUnavailableError(OracleError):
    """The oracle could not be reached, timed out or answered with an HTTP error."""


class OracleValidationError(OracleError):
    """The oracle answered, but the content is malformed or contradicts the snapshot."""
