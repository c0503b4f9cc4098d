"""
Conversion between entities and JSON-compatible dictionaries.

Decimals travel as strings so amounts survive a round trip exactly; dates
and datetimes use ISO 8601; enums use their values.
"""

import logging
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type, TypeVar, Union, get_args, get_origin, get_type_hints

from ..errors import InvalidInput
from ..models.advance import Advance, AdvanceInstallment
from ..models.attendance import AttendanceRecord
from ..models.employee import Employee
from ..models.notification import Notification
from ..models.organization import Department, PositionRecord
from ..models.payroll import PayrollRecord, PayrollSettings
from ..models.snapshot import Snapshot
from ..utils.validators import to_decimal

logger = logging.getLogger(__name__)

T = TypeVar('T')

COLLECTIONS: Tuple[Tuple[str, type], ...] = (
    ('employees', Employee),
    ('departments', Department),
    ('positions', PositionRecord),
    ('attendance_records', AttendanceRecord),
    ('advances', Advance),
    ('advance_installments', AdvanceInstallment),
    ('payroll_records', PayrollRecord),
    ('notifications', Notification),
)


def to_json(value: Any) -> Any:
    """Recursively convert an entity (or value) into JSON-compatible data"""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    return value


def _convert(tp: Any, value: Any) -> Any:
    if value is None:
        return None

    origin = get_origin(tp)
    if origin is Union:
        inner = [a for a in get_args(tp) if a is not type(None)]
        return _convert(inner[0], value)
    if origin is tuple:
        item_type = get_args(tp)[0]
        return tuple(_convert(item_type, v) for v in value)

    if isinstance(tp, type):
        if issubclass(tp, Enum):
            return tp(value)
        if tp is Decimal:
            return to_decimal(value)
        if tp is datetime:
            return value if isinstance(value, datetime) else datetime.fromisoformat(value)
        if tp is date:
            if isinstance(value, datetime):
                return value.date()
            return value if isinstance(value, date) else date.fromisoformat(value[:10])
        if is_dataclass(tp):
            return from_json(tp, value)
        if tp in (int, str, bool):
            return tp(value)
    return value


def from_json(cls: Type[T], data: Dict[str, Any]) -> T:
    """Build an entity from a dictionary; missing keys fall back to the field defaults"""
    if not isinstance(data, dict):
        raise InvalidInput(f"Expected an object for {cls.__name__}, got {type(data).__name__}")
    hints = get_type_hints(cls)
    kwargs = {}
    try:
        for f in fields(cls):
            if f.name in data:
                kwargs[f.name] = _convert(hints[f.name], data[f.name])
        return cls(**kwargs)
    except (TypeError, ValueError, ArithmeticError) as e:
        raise InvalidInput(f"Invalid {cls.__name__}: {e}")


def snapshot_to_dict(snapshot: Snapshot) -> Dict[str, Any]:
    return to_json(snapshot)


def snapshot_from_dict(data: Optional[Dict[str, Any]]) -> Snapshot:
    """Rebuild a snapshot, treating missing keys as empty and skipping malformed entries"""
    data = data or {}
    collections = {}
    for key, entity_type in COLLECTIONS:
        items = []
        for raw in data.get(key) or []:
            try:
                items.append(from_json(entity_type, raw))
            except InvalidInput as e:
                logger.warning("Skipping malformed %s entry: %s", key, e)
        collections[key] = tuple(items)

    settings = PayrollSettings()
    if data.get('settings'):
        try:
            settings = from_json(PayrollSettings, data['settings'])
        except InvalidInput as e:
            logger.warning("Saved payroll settings are invalid, using defaults: %s", e)

    return Snapshot(settings=settings, **collections)


def changes_from_json(cls: type, data: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a partial update for ``cls`` field by field"""
    if not isinstance(data, dict):
        raise InvalidInput(f"Expected an object of {cls.__name__} fields")
    hints = get_type_hints(cls)
    unknown = sorted(set(data) - set(hints))
    if unknown:
        raise InvalidInput(f"Unknown {cls.__name__} field(s): {', '.join(unknown)}")
    try:
        return {name: _convert(hints[name], value) for name, value in data.items()}
    except (TypeError, ValueError, ArithmeticError) as e:
        raise InvalidInput(f"Invalid {cls.__name__} update: {e}")
