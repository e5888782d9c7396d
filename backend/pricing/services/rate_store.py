"""
Writes to the rate tables.

Every create, update and delete goes through here so that the version counter
and the audit log stay consistent. The version only moves when a money column
or the validity window changes; cosmetic edits (notes, descriptions) keep the
version but are still audited.

A new rate for a key that already has versions should pick up where the latest
one ends. Missing windows are filled in that way, and a window that leaves a
gap or runs backwards is refused unless the caller forces it.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple, Type

from django.db import models, transaction

from ..models import FreightAuditLog, VersionedRate
from .validity import (
    add_months,
    auto_populate_validity_dates,
    check_overlap_warning,
    coerce_date,
    validate_validity_period,
    validate_version_continuity,
)

logger = logging.getLogger(__name__)

UNBOUNDED_WEIGHT_SENTINEL = Decimal("999999")
AUDIT_SKIP_FIELDS = {"id", "created_at", "updated_at"}
VALIDITY_FIELDS = ("valid_from", "valid_to")


class RateStoreError(Exception):
    """Base exception for rate store errors"""
    pass


class RateValidationError(RateStoreError):
    """Raised when a rate cannot be saved as given"""
    pass


class RateWarning(RateStoreError):
    """Raised for a window that can still be saved with ``force``"""
    pass


class RateOverlapWarning(RateWarning):
    """Raised when the validity window overlaps another version of the same key"""
    pass


class RateContinuityWarning(RateWarning):
    """Raised when a new version does not continue from the latest one"""
    pass


def _json_value(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def serialize_instance(instance: VersionedRate) -> dict:
    """JSON-safe column snapshot; foreign keys are stored as their ids."""
    data = {}
    for f in instance._meta.concrete_fields:
        value = getattr(instance, f.attname)
        if isinstance(f, models.DecimalField) and value is not None:
            # Unsaved values may carry fewer places than the column.
            value = Decimal(str(value)).quantize(Decimal(1).scaleb(-f.decimal_places))
        data[f.attname] = _json_value(value)
    return data


def diff_snapshots(before: dict, after: dict) -> List[dict]:
    changes = []
    for field in after:
        if field in AUDIT_SKIP_FIELDS:
            continue
        old, new = before.get(field), after.get(field)
        if old != new:
            changes.append({"field": field, "old_value": old, "new_value": new})
    return changes


def is_version_changing(model: Type[VersionedRate], before: dict, after: dict) -> bool:
    watched = tuple(model.MAGNITUDE_FIELDS) + VALIDITY_FIELDS
    return any(before.get(f) != after.get(f) for f in watched)


def normalize_fields(model: Type[VersionedRate], data: dict) -> dict:
    data = dict(data)
    # Legacy "no upper bound" marker.
    if "max_weight" in data and data["max_weight"] is not None:
        if Decimal(str(data["max_weight"])) >= UNBOUNDED_WEIGHT_SENTINEL:
            data["max_weight"] = None
    return data


def _key_attnames(model: Type[VersionedRate]) -> Tuple[str, ...]:
    return tuple(model._meta.get_field(name).attname for name in model.KEY_FIELDS)


def _siblings(model: Type[VersionedRate], values: dict):
    attnames = _key_attnames(model)
    return model.objects.filter(**{a: values.get(a) for a in attnames})


def find_overlap(model: Type[VersionedRate], values: dict, current_id=None) -> Optional[str]:
    """Overlap warning text for ``values`` against stored versions of the same key."""
    return check_overlap_warning(
        values.get("valid_from"),
        values.get("valid_to"),
        current_id,
        _siblings(model, values),
        same_key=lambda item: True,
    )


def find_discontinuity(model: Type[VersionedRate], values: dict, current_id=None) -> Optional[str]:
    """Continuity warning text for a new version of an existing key."""
    return validate_version_continuity(
        values.get("valid_from"),
        values.get("valid_to"),
        current_id,
        _siblings(model, values),
        same_key=lambda item: True,
    )


def suggest_validity(model: Type[VersionedRate], values: dict, on: Optional[date] = None) -> Tuple[date, date]:
    """
    Window for a new version of the key in ``values``.

    A given ``valid_from`` is kept and runs for one month. Otherwise the window
    starts the day after the latest version ends (or ``on``/today for a new
    key).
    """
    start = coerce_date(values.get("valid_from"))
    if start is not None:
        return start, add_months(start, 1)
    return auto_populate_validity_dates(None, _siblings(model, values), same_key=lambda item: True, on=on)


def write_audit(action: str, instance: VersionedRate, user=None, changes=None, snapshot=None) -> FreightAuditLog:
    entry = FreightAuditLog.objects.create(
        user=user if user is not None and user.is_authenticated else None,
        username=getattr(user, "username", "") or "",
        action=action,
        entity_type=instance.ENTITY_TYPE,
        entity_id=str(instance.pk),
        entity_snapshot=snapshot if snapshot is not None else serialize_instance(instance),
        changes=changes or [],
        version=instance.version,
    )
    logger.info(
        f"Audit {action} {instance.ENTITY_TYPE}#{instance.pk} v{instance.version}",
        extra={"changes": len(entry.changes)},
    )
    return entry


def _values_for(instance: VersionedRate) -> dict:
    return {f.attname: getattr(instance, f.attname) for f in instance._meta.concrete_fields}


def _check(model, values: dict, current_id, force: bool, continuity: bool = False) -> Optional[str]:
    error = validate_validity_period(values.get("valid_from"), values.get("valid_to"))
    if error:
        raise RateValidationError(error)

    warning = find_overlap(model, values, current_id)
    if warning and not force:
        raise RateOverlapWarning(warning)
    if not warning and continuity:
        warning = find_discontinuity(model, values, current_id)
        if warning and not force:
            raise RateContinuityWarning(warning)

    if warning:
        logger.warning(f"Saving {model.ENTITY_TYPE} despite warning: {warning}")
    return warning


@transaction.atomic
def create_rate(model: Type[VersionedRate], data: dict, user=None, force: bool = False):
    """
    Insert a new rate at version 1 and audit it.

    A missing ``valid_from``/``valid_to`` is filled from ``suggest_validity``.
    Returns ``(instance, warning)``. Raises ``RateOverlapWarning`` when the
    window overlaps another version of the same key, and
    ``RateContinuityWarning`` when it does not follow on from the latest one,
    unless ``force`` is True.
    """
    data = normalize_fields(model, data)
    instance = model(**data)
    instance.version = 1
    if user is not None and user.is_authenticated:
        instance.created_by = user

    if instance.valid_from is None or instance.valid_to is None:
        start, end = suggest_validity(model, _values_for(instance))
        instance.valid_from = instance.valid_from or start
        instance.valid_to = instance.valid_to or end

    warning = _check(model, _values_for(instance), None, force, continuity=True)
    instance.save()
    write_audit("create", instance, user)
    return instance, warning


@transaction.atomic
def update_rate(instance: VersionedRate, data: dict, user=None, force: bool = False):
    """
    Apply ``data`` to ``instance`` and audit the column diff.

    The version is bumped only when a money column or the validity window
    changes. A save that changes nothing writes no audit row.
    """
    model = type(instance)
    data = normalize_fields(model, data)
    before = serialize_instance(instance)

    for field, value in data.items():
        setattr(instance, field, value)

    warning = _check(model, _values_for(instance), instance.pk, force)

    if is_version_changing(model, before, serialize_instance(instance)):
        instance.version = (instance.version or 1) + 1
    instance.save()

    changes = diff_snapshots(before, serialize_instance(instance))
    if changes:
        write_audit("update", instance, user, changes=changes)
    else:
        logger.debug(f"No-op update to {model.ENTITY_TYPE}#{instance.pk}")
    return instance, warning


@transaction.atomic
def delete_rate(instance: VersionedRate, user=None) -> None:
    snapshot = serialize_instance(instance)
    write_audit("delete", instance, user, snapshot=snapshot)
    instance.delete()
