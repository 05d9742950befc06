"""
Config - Parameters from environment variables

Reads scheduler settings from the environment (optionally seeded from a
.env file). Unset variables keep their defaults.

Variables:
    SRS_REQUEST_RETENTION      target recall probability, e.g. 0.9
    SRS_MINIMUM_INTERVAL       days
    SRS_MAXIMUM_INTERVAL       days
    SRS_ENABLE_FUZZ            true/false
    SRS_ENABLE_SHORT_TERM      true/false
    SRS_LEARNING_STEPS         comma-separated days, e.g. "1,3"
    SRS_RELEARNING_STEPS       comma-separated days
    SRS_GRADUATION_STABILITY   days
    SRS_WEIGHTS                21 comma-separated floats (w0..w20)
    SRS_PARAMETERS_VERSION     label recorded on review logs
"""

from __future__ import annotations

import os
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

from srs_engine.fsrs.errors import ConfigError
from srs_engine.fsrs.parameters import Parameters, Weights


T = TypeVar("T")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def load_parameters(env_file: Optional[str] = None) -> Parameters:
    """
    Build a Parameters table from the environment.

    Args:
        env_file: Optional .env path (searched for when omitted);
            existing environment variables win

    Returns:
        Validated Parameters

    Raises:
        ConfigError: if a variable cannot be parsed or the result is inconsistent
    """
    load_dotenv(env_file, override=False)

    overrides = {}
    _read("SRS_REQUEST_RETENTION", float, overrides, "request_retention")
    _read("SRS_MINIMUM_INTERVAL", int, overrides, "minimum_interval")
    _read("SRS_MAXIMUM_INTERVAL", int, overrides, "maximum_interval")
    _read("SRS_ENABLE_FUZZ", _parse_bool, overrides, "enable_fuzz")
    _read("SRS_ENABLE_SHORT_TERM", _parse_bool, overrides, "enable_short_term")
    _read("SRS_LEARNING_STEPS", _parse_steps, overrides, "learning_steps")
    _read("SRS_RELEARNING_STEPS", _parse_steps, overrides, "relearning_steps")
    _read("SRS_GRADUATION_STABILITY", float, overrides, "graduation_stability")
    _read("SRS_WEIGHTS", _parse_weights, overrides, "weights")
    _read("SRS_PARAMETERS_VERSION", str.strip, overrides, "version")

    return Parameters(**overrides)


def _read(name: str, parse: Callable[[str], T], overrides: dict, field_name: str) -> None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return
    try:
        overrides[field_name] = parse(raw.strip())
    except ConfigError:
        raise
    except ValueError as exc:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from exc


def _parse_bool(raw: str) -> bool:
    value = raw.lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(raw)


def _parse_steps(raw: str) -> tuple[int, ...]:
    return tuple(int(part) for part in raw.split(",") if part.strip())


def _parse_weights(raw: str) -> Weights:
    return Weights.from_sequence(float(part) for part in raw.split(","))
