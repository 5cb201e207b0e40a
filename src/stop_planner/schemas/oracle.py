"""Pydantic models for the JSON shapes returned by the suggestion oracle."""

from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class _OracleModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class OracleNearbyStop(_OracleModel):
    stop_id: str = Field(validation_alias=AliasChoices("stopId", "subscriptionId", "stop_id"))
    distance: Optional[str] = None


class OraclePlacement(_OracleModel):
    day: str = Field(validation_alias=AliasChoices("day", "suggestedDay"))
    tech_id: str = Field(validation_alias=AliasChoices("techId", "suggestedTechId", "tech_id"))
    reasoning: str = ""
    nearby_stops: List[OracleNearbyStop] = Field(
        default_factory=list,
        validation_alias=AliasChoices("nearbyStops", "nearby_stops"),
    )
    confidence: str


class OracleSuggestion(_OracleModel):
    stop_id: str = Field(validation_alias=AliasChoices("stopId", "subscriptionId", "stop_id"))
    current_day: Optional[str] = Field(default=None, validation_alias=AliasChoices("currentDay", "current_day"))
    suggested_day: str = Field(validation_alias=AliasChoices("suggestedDay", "suggested_day"))
    suggested_tech_id: str = Field(validation_alias=AliasChoices("suggestedTechId", "suggested_tech_id"))
    reasoning: str = ""
    estimated_savings_minutes: float = Field(
        default=0.0,
        ge=0.0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("estimatedSavingsMinutes", "estimated_savings_minutes"),
    )


class OracleDrift(_OracleModel):
    suggestions: List[OracleSuggestion] = Field(default_factory=list)


class OracleAssignment(_OracleModel):
    stop_id: str = Field(validation_alias=AliasChoices("stopId", "subscriptionId", "stop_id"))
    new_day: str = Field(validation_alias=AliasChoices("newDay", "new_day"))
    new_tech_id: str = Field(validation_alias=AliasChoices("newTechId", "new_tech_id"))


class OracleReorg(_OracleModel):
    assignments: List[OracleAssignment]
    summary: str = ""
    estimated_savings_minutes: float = Field(
        default=0.0,
        ge=0.0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("estimatedSavingsMinutes", "estimated_savings_minutes"),
    )
