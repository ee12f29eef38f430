"""
Save and load plans as versioned JSON documents.

Document layout:
    {"params": {...}, "events": [...], "version": 1}
with camelCase keys so files stay compatible with earlier exports.
"""
import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence, Union

from src.simulation.models import PlanParameters, SavingsEvent

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


@dataclass
class PlanSnapshot:
    """Decoded snapshot. Missing sections are None so callers keep their current values."""
    params: Optional[PlanParameters]
    events: Optional[list[SavingsEvent]]
    version: int = SNAPSHOT_VERSION


def params_to_dict(params: PlanParameters) -> dict:
    return {
        "startDate": params.start_date.isoformat(),
        "annualReturn": params.annual_return,
        "annualInflation": params.annual_inflation,
        "capitalGainsTax": params.capital_gains_tax,
        "initialCapital": params.initial_capital
    }


def event_to_dict(event: SavingsEvent) -> dict:
    return {
        "id": event.id,
        "name": event.name,
        "monthOffset": event.month_offset,
        "targetAmount": event.target_amount
    }


def params_from_dict(data: dict) -> PlanParameters:
    try:
        return PlanParameters(
            start_date=date.fromisoformat(str(data["startDate"])[:10]),
            annual_return=float(data["annualReturn"]),
            annual_inflation=float(data["annualInflation"]),
            capital_gains_tax=float(data["capitalGainsTax"]),
            initial_capital=float(data["initialCapital"])
        )
    except KeyError as e:
        raise ValueError(f"Invalid plan file: parameter {e} missing") from e
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid plan file: bad parameter value ({e})") from e


def event_from_dict(data: dict) -> SavingsEvent:
    try:
        return SavingsEvent(
            id=str(data["id"]),
            name=str(data["name"]),
            month_offset=int(data["monthOffset"]),
            target_amount=float(data["targetAmount"])
        )
    except KeyError as e:
        raise ValueError(f"Invalid plan file: goal field {e} missing") from e
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid plan file: bad goal value ({e})") from e


def create_plan_snapshot(params: PlanParameters, events: Sequence[SavingsEvent]) -> dict:
    return {
        "params": params_to_dict(params),
        "events": [event_to_dict(e) for e in events],
        "version": SNAPSHOT_VERSION
    }


def dump_plan_snapshot(params: PlanParameters, events: Sequence[SavingsEvent]) -> str:
    return json.dumps(create_plan_snapshot(params, events), indent=2, ensure_ascii=False)


def load_plan_snapshot(content: Union[str, bytes, dict]) -> PlanSnapshot:
    """
    Decode a snapshot from JSON text or an already parsed document.

    Raises:
        ValueError: If the document is not valid JSON or has malformed fields
    """
    if isinstance(content, dict):
        data = content
    else:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid plan file: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Invalid plan file: expected a JSON object")

    version = data.get("version", SNAPSHOT_VERSION)
    if version != SNAPSHOT_VERSION:
        logger.warning("Loading plan file version %s (expected %s)", version, SNAPSHOT_VERSION)

    params = params_from_dict(data["params"]) if data.get("params") else None

    events = None
    if data.get("events") is not None:
        if not isinstance(data["events"], list):
            raise ValueError("Invalid plan file: 'events' must be a list")
        events = [event_from_dict(e) for e in data["events"]]

    logger.info(
        "Loaded plan file (params: %s, goals: %s)",
        "yes" if params else "no", len(events) if events is not None else "none"
    )
    return PlanSnapshot(params=params, events=events, version=version)


def snapshot_filename(today: Optional[date] = None) -> str:
    return f"savings-plan-{(today or date.today()).isoformat()}.json"
