"""Prompt templates for the suggestion oracle."""

from __future__ import annotations

from typing import Sequence

from ...models.domain import GeoPoint, ServiceDay, Stop
from ..planning.snapshot import Snapshot

_ROLE = "You are a route optimization assistant for a recurring field-service company."


def _tech_name(snapshot: Snapshot, stop: Stop) -> str:
    if stop.assigned_tech_id is None:
        return "Unassigned"
    tech = snapshot.technician(stop.assigned_tech_id)
    return tech.display_name if tech else "Unknown"


def _coords(stop: Stop) -> str:
    if stop.lat is None or stop.lng is None:
        return "(no coordinates)"
    return f"({stop.lat:.4f}, {stop.lng:.4f})"


def _stop_line(snapshot: Snapshot, stop: Stop) -> str:
    return f"  - {stop.client_label} [stopId: {stop.id}] at {stop.address} {_coords(stop)} - Tech: {_tech_name(snapshot, stop)}"


def _stops_by_day(snapshot: Snapshot, stops: Sequence[Stop]) -> str:
    blocks = []
    for day in snapshot.available_days:
        day_stops = [stop for stop in stops if stop.assigned_day == day]
        if not day_stops:
            blocks.append(f"{day.value}: No stops scheduled")
            continue
        lines = "\n".join(_stop_line(snapshot, stop) for stop in day_stops)
        blocks.append(f"{day.value} ({len(day_stops)} stops):\n{lines}")
    return "\n\n".join(blocks)


def _technicians(snapshot: Snapshot) -> str:
    return "\n".join(f"- {tech.display_name} (ID: {tech.id})" for tech in snapshot.technicians)


def _days_off(snapshot: Snapshot) -> str:
    off = [day.value for day in ServiceDay if day not in snapshot.available_days]
    return ", ".join(off) if off else "None - all days available"


def _clusterable_stops(snapshot: Snapshot) -> list[Stop]:
    return [stop for stop, _ in snapshot.clusterable]


def build_placement_prompt(location: GeoPoint, address: str, snapshot: Snapshot) -> str:
    return f"""{_ROLE} Your task is to determine the best day and technician for a new stop based on geographic proximity to existing stops.

## New Stop Location
Address: {address or "(not provided)"}
Coordinates: ({location.lat:.6f}, {location.lng:.6f})

## Available Technicians
{_technicians(snapshot)}

## Existing Stops by Day
{_stops_by_day(snapshot, _clusterable_stops(snapshot))}

## Days Not Available
{_days_off(snapshot)}

## Instructions
1. Analyze the geographic proximity of the new stop to existing stops on each available day.
2. Consider which technician already services stops near the new location.
3. Balance route efficiency (minimize travel between stops) with workload distribution.
4. Prefer days where the new stop would fit naturally into an existing route cluster.

## Response Format
Respond with a JSON object in this exact format:
{{
  "day": "MONDAY",
  "techId": "technician-id-here",
  "techName": "Technician Name",
  "reasoning": "A 1-2 sentence explanation of why this is the best fit.",
  "nearbyStops": [
    {{"stopId": "stop-id", "clientLabel": "Client Name", "address": "123 Main St", "distance": "0.3 mi"}}
  ],
  "confidence": "HIGH"
}}

Only include the 3-5 nearest stops in nearbyStops. Confidence is HIGH, MEDIUM or LOW."""


def build_drift_prompt(snapshot: Snapshot) -> str:
    return f"""{_ROLE} Your task is to identify stops that would significantly reduce total travel distance if moved to a different service day.

## Current Route Schedule
{_stops_by_day(snapshot, _clusterable_stops(snapshot))}

## Available Technicians
{_technicians(snapshot)}

## Days Not Available
{_days_off(snapshot)}

## Instructions
1. Analyze geographic clusters on each day.
2. Identify stops that are geographically isolated from others on their current day.
3. Check if those stops would be closer to clusters on different days.
4. Only suggest moves that would result in meaningful efficiency gains (at least 0.5 miles reduction).
5. Consider workload balance - don't overload any single day.

## Response Format
Respond with a JSON object:
{{
  "suggestions": [
    {{
      "stopId": "stop-id",
      "currentDay": "MONDAY",
      "suggestedDay": "WEDNESDAY",
      "currentTechId": "technician-id",
      "suggestedTechId": "technician-id",
      "reasoning": "This stop is 2.1 miles from the nearest Monday stop but only 0.3 miles from the Wednesday cluster.",
      "estimatedSavingsMinutes": 8
    }}
  ]
}}

Only include suggestions with clear efficiency benefits. It's okay to return an empty suggestions array if no improvements are found."""


def build_reorg_prompt(snapshot: Snapshot) -> str:
    lines = "\n".join(
        f"- {stop.client_label} [stopId: {stop.id}] at {stop.address} {_coords(stop)} - "
        f"Currently: {stop.assigned_day.value if stop.assigned_day else 'Unassigned'}, "
        f"Tech: {_tech_name(snapshot, stop)}, Frequency: {stop.visit_frequency or 'unknown'}"
        for stop in snapshot.stops
    )
    return f"""{_ROLE} Your task is to completely reorganize all routes for maximum efficiency.

## All Stops ({len(snapshot.stops)} total)
{lines}

## Available Technicians
{_technicians(snapshot)}

## Available Service Days
{", ".join(day.value for day in snapshot.available_days)}

## Days Not Available
{_days_off(snapshot)}

## Instructions
1. Group stops geographically into efficient route clusters.
2. Assign each cluster to an available day.
3. Assign technicians to days based on cluster density and workload balance.
4. Minimize total travel distance across all routes.
5. Balance workload roughly equally across available days.
6. Keep visit frequencies in mind (some stops are weekly, biweekly, etc.)
7. Every stop listed above must appear exactly once in assignments.

## Response Format
Respond with a JSON object:
{{
  "assignments": [
    {{"stopId": "stop-id", "newDay": "TUESDAY", "newTechId": "technician-id"}}
  ],
  "summary": "Reorganized 45 stops across 5 days. Estimated 40% reduction in total travel distance.",
  "estimatedSavingsMinutes": 120
}}"""
