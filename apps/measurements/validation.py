"""
Whole-set validation for a measurement profile.

Runs the per-field plausibility check on every present value, flags values
that fall outside the common ("typical") range, and applies the cross-field
consistency rules. All values are expected in inches (weight in pounds).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .units import (
    INCHES,
    UNIT_SYMBOLS,
    body_mass_index,
    convert_unit,
    format_measurement,
    normalize_unit,
    to_number,
    validate_measurement,
)

VALID = "valid"
WARNING = "warning"
INVALID = "invalid"

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"

# (min, max, (typical_low, typical_high)) in inches.
MEASUREMENT_RANGES: Dict[str, Tuple[float, float, Tuple[float, float]]] = {
    "neck": (12, 20, (14, 17)),
    "bust": (28, 50, (32, 42)),
    "waist": (24, 45, (28, 36)),
    "hip": (30, 50, (34, 44)),
    "shoulder": (14, 22, (16, 19)),
    "sleeve": (20, 28, (23, 26)),
    "inseam": (26, 36, (30, 34)),
    "outseam": (36, 48, (40, 44)),
    "thigh": (18, 30, (20, 26)),
    "calf": (12, 20, (14, 17)),
    "height": (48, 84, (60, 72)),
}

@dataclass(frozen=True)
class CrossCheck:
    first: str
    second: str
    violated: Callable[[float, float], bool]
    message: str
    severity: str

CROSS_CHECKS = (
    CrossCheck(
        "waist", "hip", lambda waist, hip: waist > hip,
        "Waist measurement is larger than hip measurement, which is unusual",
        SEVERITY_WARNING,
    ),
    CrossCheck(
        "bust", "waist", lambda bust, waist: bust < waist,
        "Bust measurement is smaller than waist measurement, please verify",
        SEVERITY_WARNING,
    ),
    CrossCheck(
        "inseam", "outseam", lambda inseam, outseam: inseam > outseam,
        "Inseam is longer than outseam, which is not possible",
        SEVERITY_ERROR,
    ),
    CrossCheck(
        "thigh", "calf", lambda thigh, calf: thigh < calf,
        "Thigh measurement is smaller than calf measurement, please verify",
        SEVERITY_WARNING,
    ),
)

@dataclass
class ValidationReport:
    overall: str = VALID
    score: int = 0
    issues: List[dict] = field(default_factory=list)
    warnings: List[dict] = field(default_factory=list)
    suggestions: List[dict] = field(default_factory=list)
    details: Dict[str, dict] = field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return bool(self.issues)

    def as_dict(self) -> dict:
        return {
            "overall": self.overall,
            "score": self.score,
            "issues": self.issues,
            "warnings": self.warnings,
            "suggestions": self.suggestions,
            "details": self.details,
        }

def _present_values(values: Mapping[str, Any]) -> Dict[str, float]:
    present = {}
    for name in list(MEASUREMENT_RANGES) + ["weight"]:
        number = to_number(values.get(name))
        if number is not None:
            present[name] = number
    return present

def validate_measurement_set(values: Mapping[str, Any], display_unit: str = INCHES) -> ValidationReport:
    report = ValidationReport()
    present = _present_values(values)

    valid_count = 0
    total_count = 0
    for name, (low, high, typical) in MEASUREMENT_RANGES.items():
        value = present.get(name)
        if value is None:
            continue
        total_count += 1
        check = validate_measurement(value, name, INCHES)
        in_typical_range = typical[0] <= value <= typical[1]
        report.details[name] = {
            "value": value,
            "is_valid": check.is_valid,
            "message": check.message,
            "in_range": low <= value <= high,
            "in_typical_range": in_typical_range,
        }

        if check.is_valid:
            valid_count += 1
            if not in_typical_range:
                report.warnings.append({
                    "field": name,
                    "message": f"{name} measurement ({_display(value, display_unit)}) is outside typical range",
                    "severity": SEVERITY_WARNING,
                })
        else:
            report.issues.append({"field": name, "message": check.message, "severity": SEVERITY_ERROR})

    for rule in CROSS_CHECKS:
        first = present.get(rule.first)
        second = present.get(rule.second)
        if first is None or second is None or not rule.violated(first, second):
            continue
        entry = {"field": "cross-validation", "message": rule.message, "severity": rule.severity}
        if rule.severity == SEVERITY_ERROR:
            report.issues.append(entry)
        else:
            report.warnings.append(entry)

    report.score = round(valid_count / total_count * 100) if total_count else 0
    if report.issues:
        report.overall = INVALID
    elif report.warnings:
        report.overall = WARNING

    suggestion = _bmi_suggestion(present.get("height"), present.get("weight"))
    if suggestion:
        report.suggestions.append(suggestion)

    return report

def _display(value_in_inches: float, unit: str) -> str:
    converted = convert_unit(value_in_inches, INCHES, unit)
    return f"{format_measurement(converted, unit)} {UNIT_SYMBOLS[normalize_unit(unit)]}"

def _bmi_suggestion(height: Optional[float], weight: Optional[float]) -> Optional[dict]:
    bmi = body_mass_index(height, INCHES, weight)
    if bmi is None or 18.5 <= bmi <= 30:
        return None
    return {
        "type": "health",
        "message": (
            f"BMI of {bmi:.1f} suggests consulting with a healthcare provider "
            "for optimal measurements"
        ),
    }
