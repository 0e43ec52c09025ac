"""
Serialization module for sglife life plans.

Purpose
-------
Exports a PlanningContext as a CompleteProfile JSON document (camelCase
keys) and imports such documents back, validating their structure with
the pydantic wire models in config.py before any domain object is built.

Design Principles
-----------------
- Structural validation first: malformed files raise ProfileImportError
  and never reach the engine
- Backward compatible: legacy cost fields are accepted; schema version
  mismatches warn instead of failing
- Human-readable: indented JSON

Example
-------
>>> from pathlib import Path
>>> from sglife.scenarios import PlanningContext
>>> from sglife.serialization import export_profile, save_profile, load_profile, import_profile
>>> ctx = PlanningContext()
>>> profile = export_profile(ctx, "First flat", tags=["Family"])
>>> save_profile(profile, Path(profile_filename("First flat")))
>>> restored = import_profile(None, load_profile(Path("first-flat-life-plan.json")))
"""

from __future__ import annotations

import datetime
import json
import logging
import re
import warnings
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from .config import CompleteProfileModel
from .constants import RETIREMENT_TARGET_AGE
from .exceptions import ProfileImportError, SgLifeError
from .modules import TimelineModule
from .scenarios import PlanningContext, Scenario
from .state import FinancialState
from .types import ProfileStatsDict

__all__ = [
    "SCHEMA_VERSION",
    "profile_stats",
    "export_profile",
    "save_profile",
    "load_profile",
    "import_profile",
    "profile_filename",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Schema Version
# ---------------------------------------------------------------------------

SCHEMA_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def profile_stats(context: PlanningContext) -> ProfileStatsDict:
    """Preview statistics from the active scenario's projection."""
    snapshots = context.project().snapshots
    return {
        "retirementAge": RETIREMENT_TARGET_AGE,
        "finalNetWorth": snapshots[-1].net_worth if snapshots else 0,
        "peakCashFlow": max((s.cash_flow for s in snapshots), default=0),
        "totalLifeEvents": sum(len(s.modules) for s in context.scenarios),
    }


def export_profile(
    context: PlanningContext,
    name: str,
    description: str = "",
    tags: Optional[Iterable[str]] = None,
    author: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build a CompleteProfile document for *context*.

    Returns
    -------
    dict
        camelCase mapping ready for json.dump.
    """
    now = datetime.datetime.now(datetime.timezone.utc).isoformat()
    return {
        "id": f"profile-{int(datetime.datetime.now().timestamp() * 1000)}",
        "name": name,
        "description": description,
        "author": author or "Anonymous",
        "createdAt": now,
        "updatedAt": now,
        "version": SCHEMA_VERSION,
        "isTemplate": False,
        "tags": list(tags or []),
        "financial": context.financial.to_dict(),
        "scenarios": [s.to_dict() for s in context.scenarios],
        "activeScenarioId": context.active_scenario_id,
        "customModules": [m.to_dict() for m in context.custom_modules],
        "stats": dict(profile_stats(context)),
    }


def profile_filename(name: str) -> str:
    """``"My Plan"`` -> ``"my-plan-life-plan.json"``."""
    slug = re.sub(r"\s+", "-", name.strip()).lower()
    return f"{slug}-life-plan.json"


def save_profile(profile: Mapping[str, Any], path: Path) -> Path:
    """
    Write *profile* to *path* as indented JSON.

    Parent directories are created as needed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(profile, f, indent=2, ensure_ascii=False)
    logger.debug("Saved profile %s to %s", profile.get("id"), path)
    return path


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

def _validate(data: Any) -> CompleteProfileModel:
    if isinstance(data, CompleteProfileModel):
        return data
    if not isinstance(data, Mapping):
        raise ProfileImportError("Invalid profile file: top level must be a JSON object.")
    try:
        model = CompleteProfileModel.model_validate(data)
    except PydanticValidationError as exc:
        raise ProfileImportError(f"Invalid profile file: {exc}") from exc

    if model.version != SCHEMA_VERSION:
        warnings.warn(
            f"Profile version {model.version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )
    return model


def load_profile(path: Path) -> CompleteProfileModel:
    """
    Read and structurally validate a CompleteProfile JSON file.

    Raises
    ------
    ProfileImportError
        Unreadable file, invalid JSON or a structurally invalid profile.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ProfileImportError(f"Could not read profile {path}: {exc}") from exc
    return _validate(data)


def import_profile(
    context: Optional[PlanningContext],
    profile: Union[CompleteProfileModel, Mapping[str, Any]],
) -> PlanningContext:
    """
    Build a PlanningContext holding the profile's scenarios and custom modules.

    Parameters
    ----------
    context : PlanningContext, optional
        Existing context whose engine config is kept. Its scenarios are
        replaced (the returned context is a new object).
    profile : CompleteProfileModel or mapping

    Notes
    -----
    A profile without scenarios imports as a single "Main" scenario built
    from its top-level financial state.
    """
    model = _validate(profile)
    dumped = model.model_dump(by_alias=True, exclude_none=True)
    config = context.config if context is not None else None

    try:
        custom = [TimelineModule.from_dict(m) for m in dumped.get("customModules", [])]
        scenarios = [Scenario.from_dict(s) for s in dumped.get("scenarios", [])]
        if not scenarios:
            fresh = PlanningContext(FinancialState.from_dict(dumped["financial"]), config=config)
            fresh.custom_modules = custom
            return fresh
    except (SgLifeError, KeyError, TypeError, ValueError) as exc:
        raise ProfileImportError(f"Invalid profile file: {exc}") from exc

    logger.debug("Imported profile %s with %d scenarios", model.id, len(scenarios))
    return PlanningContext.from_scenarios(
        scenarios,
        active_scenario_id=model.active_scenario_id,
        custom_modules=custom,
        config=config,
    )
