"""
Calculation policy for the freight cost engine.

Business rules that used to be hard-coded (the fallback trucking partner, the
labels shown for expired rates, the "expiring soon" window) live in a JSON
file so they can be changed and tested without touching the engine.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from django.conf import settings

from ..dataclasses import CalculationPolicy

logger = logging.getLogger(__name__)

RATE_COMPONENTS = (
    "seaFreight",
    "dthc",
    "combinedFreight",
    "railFreight",
    "truckFreight",
    "weightSurcharge",
    "dp",
)
MISSING_KINDS = (
    "seaFreightRequiredForDp",
    "seaFreight",
    "combinedFreight",
    "railFreight",
    "truckFreight",
)


class CalculationPolicyError(Exception):
    """Base exception for calculation policy errors"""
    pass


class PolicyConfigurationError(CalculationPolicyError):
    """Raised when the policy file cannot be loaded"""
    pass


class PolicyValidationError(CalculationPolicyError):
    """Raised when the policy file is structurally invalid"""
    pass


def _default_policy_path() -> Path:
    configured = getattr(settings, "FREIGHT_CALCULATION_POLICY_PATH", None)
    if configured:
        return Path(configured)
    return Path(__file__).parent.parent / "config" / "calculation_policy.json"


def load_calculation_policy(config_path: str = None) -> dict:
    """
    Load the calculation policy from a JSON file

    Args:
        config_path: Path to the policy file. If None, uses the configured or default location.

    Returns:
        dict: Parsed policy configuration

    Raises:
        PolicyConfigurationError: If the file cannot be loaded or parsed
    """
    path = Path(config_path) if config_path else _default_policy_path()
    try:
        if not path.exists():
            raise PolicyConfigurationError(f"Calculation policy file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)

        logger.info(f"Loaded calculation policy from {path}")
        return raw

    except json.JSONDecodeError as e:
        raise PolicyConfigurationError(f"Invalid JSON in calculation policy file: {e}")
    except PolicyConfigurationError:
        raise
    except Exception as e:
        raise PolicyConfigurationError(f"Error loading calculation policy: {e}")


def validate_calculation_policy(raw: dict) -> List[str]:
    """
    Validate that a policy dictionary is complete

    Returns:
        List[str]: Validation errors (empty if valid)
    """
    errors = []

    for key in ("version", "expired_labels", "missing_messages"):
        if key not in raw:
            errors.append(f"Missing required top-level key: {key}")

    partner = raw.get("fallback_truck_partner")
    if partner is not None and not isinstance(partner, str):
        errors.append("fallback_truck_partner must be a string or null")

    days = raw.get("expiring_soon_days", 7)
    if isinstance(days, bool) or not isinstance(days, int) or days < 0:
        errors.append("expiring_soon_days must be a non-negative integer")

    labels = raw.get("expired_labels", {})
    if not isinstance(labels, dict):
        errors.append("expired_labels must be a dictionary")
    else:
        for component in RATE_COMPONENTS:
            if not labels.get(component):
                errors.append(f"Missing expired label for component: {component}")

    messages = raw.get("missing_messages", {})
    if not isinstance(messages, dict):
        errors.append("missing_messages must be a dictionary")
    else:
        for kind in MISSING_KINDS:
            if not messages.get(kind):
                errors.append(f"Missing message for missing-freight kind: {kind}")

    if errors:
        logger.warning(f"Calculation policy validation found {len(errors)} errors")
    return errors


def build_policy(raw: dict, fallback_truck_partner: Optional[str] = None) -> CalculationPolicy:
    partner = raw.get("fallback_truck_partner")
    if fallback_truck_partner is not None:
        # An empty override disables the partner row entirely.
        partner = fallback_truck_partner or None
    return CalculationPolicy(
        fallback_truck_partner=partner,
        expiring_soon_days=raw.get("expiring_soon_days", 7),
        expired_labels=dict(raw.get("expired_labels", {})),
        missing_messages=dict(raw.get("missing_messages", {})),
    )


def get_calculation_policy() -> CalculationPolicy:
    """Cached policy instance; validated on first load."""
    if not hasattr(get_calculation_policy, "_cached_policy"):
        raw = load_calculation_policy()
        errors = validate_calculation_policy(raw)
        if errors:
            logger.error(f"Calculation policy validation failed: {errors}")
            raise PolicyValidationError(f"Calculation policy validation failed: {errors}")
        get_calculation_policy._cached_policy = build_policy(
            raw, getattr(settings, "FREIGHT_FALLBACK_TRUCK_PARTNER", None)
        )
    return get_calculation_policy._cached_policy


def clear_calculation_policy_cache():
    """Drop the cached policy (tests and config reloads)"""
    if hasattr(get_calculation_policy, "_cached_policy"):
        delattr(get_calculation_policy, "_cached_policy")
