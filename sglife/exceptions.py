"""
Custom exceptions for sglife.

Purpose
-------
Provides a unified exception hierarchy for consistent error handling
across all sglife modules. All exceptions inherit from SgLifeError,
enabling catch-all handling when needed.

Exception Hierarchy
-------------------
SgLifeError (base)
├── ConfigurationError - Invalid configuration or parameters
├── ValidationError - Structurally invalid or non-finite inputs
│   ├── ModuleCreationError - Rejected custom module (blank name, amount <= 0)
│   └── TimelineError - Module placed outside the plannable age range
├── ScenarioNotFoundError - Unknown scenario id
├── UnknownModuleError - Unknown module id
└── ProfileImportError - Malformed CompleteProfile file

Negative cash or a drained OA are never errors: they are projection output.

Usage
-----
>>> from sglife.exceptions import ModuleCreationError
>>> try:
...     create_custom_module(name="", amount=100)
... except ModuleCreationError as e:
...     print(f"Rejected: {e}")
"""

__all__ = [
    "SgLifeError",
    "ConfigurationError",
    "ValidationError",
    "ModuleCreationError",
    "TimelineError",
    "ScenarioNotFoundError",
    "UnknownModuleError",
    "ProfileImportError",
]


class SgLifeError(Exception):
    """
    Base exception for all sglife errors.

    Examples
    --------
    >>> try:
    ...     context.switch_scenario("missing")
    ... except SgLifeError as e:
    ...     logger.error(f"Planning failed: {e}")
    """
    pass


class ConfigurationError(SgLifeError):
    """
    Invalid configuration or parameters.

    Raised when engine configuration is inconsistent, such as a terminal
    age below the projection start age.
    """
    pass


class ValidationError(SgLifeError):
    """
    Data validation failures.

    Raised at the engine boundary when a required numeric field is missing
    or not finite (NaN would otherwise poison every later year).

    Examples
    --------
    >>> raise ValidationError("monthly_income must be finite, got nan")
    """
    pass


class ModuleCreationError(ValidationError):
    """
    A custom module could not be created.

    The caller must re-prompt; no module is produced.

    Examples
    --------
    >>> raise ModuleCreationError("amount must be > 0, got 0")
    """
    pass


class TimelineError(ValidationError):
    """
    A module was placed on an age slot before the scenario's current age.
    """
    pass


class ScenarioNotFoundError(SgLifeError):
    """Unknown scenario id."""
    pass


class UnknownModuleError(SgLifeError):
    """Unknown module id on the active timeline or in the custom library."""
    pass


class ProfileImportError(SgLifeError):
    """
    A CompleteProfile file is unreadable or structurally invalid.

    Surfaced to the user as an "invalid file" message; the engine is never
    handed the partially parsed data.
    """
    pass
