# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Cron Normalizer - Converts schedule trigger parameters into 5-field cron strings.

n8n has used several parameter dialects for schedules over time:
- Schedule Trigger v1.x: rule.interval = [{field, <field>Interval, triggerAt*}]
- rule.interval entries written as {field|unit, value, triggerAt: {hour, minute}}
- Legacy Cron node: triggerTimes.item = [{mode, hour, minute, ...}]
- Legacy Interval node: {interval, unit}
- Plain cron strings in several places (rule.cronExpression, cronExpression, cron)

Each interval entry is classified by SHAPE_DETECTORS, tried in order; the first
detector that yields a cron wins. normalize() never raises: anything it cannot
understand becomes an entry in `errors`.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

MISSING_INTERVAL_ERROR = "Missing rule.interval"

_EXPRESSION_PREFIX = re.compile(r"^=\s*")


@dataclass
class CronParseResult:
    """Normalized crons (deduplicated, first-seen order) plus parse diagnostics"""
    crons: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def add_cron(self, cron: str) -> None:
        if cron not in self.crons:
            self.crons.append(cron)


class UnsupportedShape(ValueError):
    """An entry was recognized but carries values cron cannot express."""


# =============================================================================
# TOLERANT COERCION
# =============================================================================

def to_number(value: Any) -> Optional[float]:
    """
    Coerce numbers and numeric strings; reject booleans and non-finite results.

    >>> to_number("10"), to_number(2.5), to_number("abc"), to_number(True)
    (10.0, 2.5, None, None)
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_interval(value: Any) -> Optional[int]:
    """A positive whole step. Fractions are floored; anything below 1 is absent."""
    number = to_number(value)
    if number is None:
        return None
    step = math.floor(number)
    return step if step >= 1 else None


def _get_str(obj: Mapping[str, Any], key: str) -> Optional[str]:
    value = obj.get(key)
    return value if isinstance(value, str) else None


def _get_mapping(obj: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    value = obj.get(key)
    return value if isinstance(value, Mapping) else None


def _get_list(obj: Mapping[str, Any], key: str) -> List[Any]:
    value = obj.get(key)
    return list(value) if isinstance(value, (list, tuple)) else []


def _first_number(sources: Sequence[Mapping[str, Any]], keys: Sequence[str]) -> Optional[float]:
    for source in sources:
        for key in keys:
            number = to_number(source.get(key))
            if number is not None:
                return number
    return None


def _first_interval(obj: Mapping[str, Any], keys: Sequence[str]) -> Optional[int]:
    for key in keys:
        step = to_interval(obj.get(key))
        if step is not None:
            return step
    return None


def _cron_field(value: Optional[float], default: int, low: int, high: int, name: str) -> int:
    if value is None:
        return default
    number = math.floor(value)
    if number < low or number > high:
        raise UnsupportedShape(f"{name} {number} is outside {low}-{high}")
    return number


def _step(step: int, high: int, name: str) -> int:
    if step > high:
        raise UnsupportedShape(f"{name} interval {step} exceeds {high}")
    return step


# =============================================================================
# INTERVAL ENTRY
# =============================================================================

@dataclass(frozen=True)
class IntervalEntry:
    """One interval entry plus the trigger-time objects it may inherit from."""
    raw: Mapping[str, Any]
    rule_trigger_at: Optional[Mapping[str, Any]] = None

    @property
    def field_name(self) -> Optional[str]:
        return _get_str(self.raw, "field") or _get_str(self.raw, "unit")

    @property
    def time_sources(self) -> List[Mapping[str, Any]]:
        sources = []
        nested = _get_mapping(self.raw, "triggerAt")
        if nested is not None:
            sources.append(nested)
        sources.append(self.raw)
        if self.rule_trigger_at is not None:
            sources.append(self.rule_trigger_at)
        return sources

    def minute(self) -> int:
        value = _first_number(self.time_sources, ("triggerAtMinute", "minute"))
        return _cron_field(value, 0, 0, 59, "minute")

    def hour(self) -> int:
        value = _first_number(self.time_sources, ("triggerAtHour", "hour"))
        return _cron_field(value, 0, 0, 23, "hour")

    def has_hour(self) -> bool:
        return _first_number(self.time_sources, ("triggerAtHour", "hour")) is not None

    def day_of_month(self) -> int:
        value = _first_number(self.time_sources, ("triggerAtDayOfMonth", "dayOfMonth"))
        return _cron_field(value, 1, 1, 31, "day of month")

    def weekdays(self) -> List[int]:
        for source in self.time_sources:
            days = [day for day in _get_list(source, "triggerAtDay")
                    if isinstance(day, (int, float)) and not isinstance(day, bool)]
            if days:
                result: List[int] = []
                for day in days:
                    weekday = _cron_field(float(day), 0, 0, 7, "weekday")
                    if weekday not in result:
                        result.append(weekday)
                return result
        weekday = _first_number(self.time_sources, ("weekday", "triggerAtDay"))
        if weekday is not None:
            return [_cron_field(weekday, 0, 0, 7, "weekday")]
        return []


# =============================================================================
# SHAPE DETECTORS
# =============================================================================

def _cron_expression(entry: IntervalEntry) -> Optional[str]:
    if entry.field_name != "cronExpression":
        return None
    raw = _get_str(entry.raw, "expression") or _get_str(entry.raw, "cronExpression")
    if not raw:
        return None
    expression = _EXPRESSION_PREFIX.sub("", raw.strip()).strip()
    return expression or None


def _minutes_interval(entry: IntervalEntry) -> Optional[str]:
    step = to_interval(entry.raw.get("minutesInterval"))
    if step is None:
        return None
    return f"*/{_step(step, 59, 'minutes')} * * * *"


def _days_interval(entry: IntervalEntry) -> Optional[str]:
    step = to_interval(entry.raw.get("daysInterval"))
    if step is None:
        return None
    return f"{entry.minute()} {entry.hour()} */{_step(step, 31, 'days')} * *"


def _weeks(entry: IntervalEntry) -> Optional[str]:
    if entry.field_name != "weeks":
        return None
    minute, hour = entry.minute(), entry.hour()
    weekdays = entry.weekdays()
    if weekdays:
        return f"{minute} {hour} * * {','.join(str(day) for day in weekdays)}"
    step = _first_interval(entry.raw, ("weeksInterval", "value", "interval")) or 1
    return f"{minute} {hour} */{_step(step, 31, 'weeks')} * *"


def _months(entry: IntervalEntry) -> Optional[str]:
    if entry.field_name != "months":
        return None
    step = _first_interval(entry.raw, ("monthsInterval", "value", "interval")) or 1
    return f"{entry.minute()} {entry.hour()} {entry.day_of_month()} */{_step(step, 12, 'months')} *"


def _minutes(entry: IntervalEntry) -> Optional[str]:
    if entry.field_name != "minutes":
        return None
    step = _first_interval(entry.raw, ("minutesInterval", "interval", "value"))
    if step is None:
        return None
    return f"*/{_step(step, 59, 'minutes')} * * * *"


def _hours(entry: IntervalEntry) -> Optional[str]:
    if entry.field_name != "hours":
        return None
    step = _first_interval(entry.raw, ("hoursInterval", "interval", "value"))
    if step is None:
        return None
    return f"{entry.minute()} */{_step(step, 23, 'hours')} * * *"


def _days(entry: IntervalEntry) -> Optional[str]:
    if entry.field_name != "days":
        return None
    step = _first_interval(entry.raw, ("daysInterval", "value", "interval"))
    if step is None:
        return None
    return f"{entry.minute()} {entry.hour()} */{_step(step, 31, 'days')} * *"


def _daily_at_hour(entry: IntervalEntry) -> Optional[str]:
    if not entry.has_hour():
        return None
    return f"{entry.minute()} {entry.hour()} * * *"


ShapeDetector = Callable[[IntervalEntry], Optional[str]]

SHAPE_DETECTORS: Tuple[Tuple[str, ShapeDetector], ...] = (
    ("cronExpression", _cron_expression),
    ("minutesInterval", _minutes_interval),
    ("daysInterval", _days_interval),
    ("weeks", _weeks),
    ("months", _months),
    ("minutes", _minutes),
    ("hours", _hours),
    ("days", _days),
    ("dailyAtHour", _daily_at_hour),
)


def detect_shape(
    interval: Mapping[str, Any],
    rule_trigger_at: Optional[Mapping[str, Any]] = None
) -> Optional[Tuple[str, str]]:
    """
    Classify one interval entry.

    Returns:
        (shape kind, cron) for the first matching detector, or None

    Raises:
        UnsupportedShape: A detector matched but a value is out of cron range
    """
    entry = IntervalEntry(raw=interval, rule_trigger_at=rule_trigger_at)
    for kind, detector in SHAPE_DETECTORS:
        cron = detector(entry)
        if cron:
            return kind, cron
    return None


def interval_to_cron(
    interval: Mapping[str, Any],
    rule_trigger_at: Optional[Mapping[str, Any]] = None
) -> Optional[str]:
    """Cron for one interval entry, or None when the entry is not understood."""
    try:
        detected = detect_shape(interval, rule_trigger_at)
    except UnsupportedShape:
        return None
    return detected[1] if detected else None


# =============================================================================
# LEGACY CRON NODE (triggerTimes.item)
# =============================================================================

def _trigger_time_items(parameters: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    trigger_times = parameters.get("triggerTimes")
    if isinstance(trigger_times, Mapping):
        items = _get_list(trigger_times, "item")
    elif isinstance(trigger_times, (list, tuple)):
        items = list(trigger_times)
    else:
        items = []
    return [item for item in items if isinstance(item, Mapping)]


def trigger_time_to_cron(item: Mapping[str, Any]) -> Optional[str]:
    """Translate one legacy Cron node trigger time ({mode, hour, minute, ...})."""
    mode = _get_str(item, "mode")
    if mode is None:
        return None

    entry = IntervalEntry(raw=item)
    try:
        if mode == "everyMinute":
            return "* * * * *"
        if mode == "everyHour":
            return f"{entry.minute()} * * * *"
        if mode == "everyDay":
            return f"{entry.minute()} {entry.hour()} * * *"
        if mode == "everyWeek":
            weekday = _cron_field(to_number(item.get("weekday")), 1, 0, 7, "weekday")
            return f"{entry.minute()} {entry.hour()} * * {weekday}"
        if mode == "everyMonth":
            return f"{entry.minute()} {entry.hour()} {entry.day_of_month()} * *"
        if mode == "everyX":
            step = to_interval(item.get("value"))
            unit = _get_str(item, "unit")
            if step is None:
                return None
            if unit == "minutes":
                return f"*/{_step(step, 59, 'minutes')} * * * *"
            if unit == "hours":
                return f"0 */{_step(step, 23, 'hours')} * * *"
            return None
        if mode == "custom":
            expression = _get_str(item, "cronExpression")
            if not expression:
                return None
            fields = expression.strip().split()
            # Legacy custom expressions carry a leading seconds field.
            if len(fields) == 6:
                fields = fields[1:]
            return " ".join(fields) or None
    except UnsupportedShape:
        return None
    return None


# =============================================================================
# NORMALIZE
# =============================================================================

def _literal_cron(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    expression = _EXPRESSION_PREFIX.sub("", value.strip()).strip()
    return expression or None


def _legacy_crons(parameters: Mapping[str, Any], rule: Optional[Mapping[str, Any]]) -> List[str]:
    """Crons from the older parameter dialects, in precedence order."""
    crons: List[str] = []

    def add(cron: Optional[str]) -> None:
        if cron and cron not in crons:
            crons.append(cron)

    if rule is not None:
        add(_literal_cron(rule.get("cronExpression")))
        rule_interval = _get_mapping(rule, "interval")
        if rule_interval is not None:
            add(interval_to_cron(rule_interval, _get_mapping(rule, "triggerAt")))

    add(_literal_cron(parameters.get("cronExpression")))

    for legacy_rule in _get_list(parameters, "rules"):
        if not isinstance(legacy_rule, Mapping):
            continue
        cron = _literal_cron(legacy_rule.get("cronExpression"))
        if cron:
            add(cron)
            continue
        interval = _get_mapping(legacy_rule, "interval")
        if interval is not None:
            add(interval_to_cron(interval, _get_mapping(legacy_rule, "triggerAt")))

    trigger_items = _trigger_time_items(parameters)
    interval = _get_mapping(parameters, "interval")
    if interval is not None:
        add(interval_to_cron(interval, trigger_items[0] if trigger_items else None))
    else:
        for item in trigger_items:
            add(trigger_time_to_cron(item))

    add(_literal_cron(parameters.get("cron")))

    # Legacy Interval node: {interval: 10, unit: "minutes"}
    if _get_str(parameters, "unit") and to_interval(parameters.get("interval")) is not None:
        add(interval_to_cron(parameters))

    return crons


def normalize(parameters: Any) -> CronParseResult:
    """
    Normalize schedule trigger parameters into canonical cron expressions.

    Args:
        parameters: A schedule trigger node's `parameters` (or a bare rule
                    object carrying an `interval` list)

    Returns:
        CronParseResult with deduplicated crons and human-readable errors.
        Never raises.

    Example:
        >>> normalize({"rule": {"interval": [{"field": "minutes", "minutesInterval": 5}]}}).crons
        ['*/5 * * * *']
    """
    result = CronParseResult()
    if not isinstance(parameters, Mapping):
        result.errors.append(MISSING_INTERVAL_ERROR)
        return result

    rule = _get_mapping(parameters, "rule")
    if rule is None and isinstance(parameters.get("interval"), (list, tuple)):
        rule = parameters

    intervals = _get_list(rule, "interval") if rule is not None else []
    if not intervals:
        for cron in _legacy_crons(parameters, rule):
            result.add_cron(cron)
        if not result.crons:
            result.errors.append(MISSING_INTERVAL_ERROR)
        return result

    rule_trigger_at = _get_mapping(rule, "triggerAt")
    for index, interval in enumerate(intervals):
        if not isinstance(interval, Mapping):
            result.errors.append(f"Interval {index}: invalid")
            continue
        try:
            detected = detect_shape(interval, rule_trigger_at)
        except UnsupportedShape:
            result.errors.append(f"Interval {index}: unsupported format")
            continue
        if detected is None:
            result.errors.append(f"Interval {index}: unsupported format")
            continue
        result.add_cron(detected[1])

    return result
