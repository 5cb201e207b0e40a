"""Optional external suggestion oracle."""

from .client import Accepted, OracleResult, Rejected, SuggestionOracle

__all__ = ["Accepted", "OracleResult", "Rejected", "SuggestionOracle"]
