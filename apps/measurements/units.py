"""
Unit conversion and plausibility checks for body measurements.

Pure Python, framework-agnostic: no Django imports in this module.
Lengths are stored canonically in inches and weights in pounds.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Dict, Optional, Tuple

INCHES = "inches"
CENTIMETERS = "cm"
FEET = "feet"
METERS = "meters"

LENGTH_UNITS = (INCHES, CENTIMETERS, FEET, METERS)

UNIT_ALIASES = {
    "inches": INCHES,
    "inch": INCHES,
    "in": INCHES,
    "cm": CENTIMETERS,
    "centimeters": CENTIMETERS,
    "centimetres": CENTIMETERS,
    "feet": FEET,
    "foot": FEET,
    "ft": FEET,
    "meters": METERS,
    "metres": METERS,
    "m": METERS,
}

UNIT_SYMBOLS = {
    INCHES: "in",
    CENTIMETERS: "cm",
    FEET: "ft",
    METERS: "m",
}

# Inches per unit.
CONVERSION_FACTORS = {
    INCHES: 1.0,
    CENTIMETERS: 0.393701,
    FEET: 12.0,
    METERS: 39.3701,
}

POUNDS = "lb"
KILOGRAMS = "kg"

WEIGHT_UNITS = (POUNDS, KILOGRAMS)

WEIGHT_ALIASES = {
    "lb": POUNDS,
    "lbs": POUNDS,
    "pounds": POUNDS,
    "kg": KILOGRAMS,
    "kgs": KILOGRAMS,
    "kilograms": KILOGRAMS,
}

KG_PER_POUND = 0.453592
POUNDS_PER_KG = 2.20462

# Plausibility ranges in inches.
VALIDATION_RANGES: Dict[str, Tuple[float, float]] = {
    "neck": (10, 25),
    "bust": (20, 60),
    "waist": (20, 60),
    "hip": (25, 65),
    "shoulder": (12, 30),
    "sleeve": (15, 40),
    "inseam": (20, 40),
    "outseam": (30, 50),
    "thigh": (15, 35),
    "calf": (10, 25),
}

# Size chart in inches.
SIZE_CHART: Dict[str, Dict[str, float]] = {
    "XS": {"bust": 32, "waist": 24, "hip": 34},
    "S": {"bust": 34, "waist": 26, "hip": 36},
    "M": {"bust": 36, "waist": 28, "hip": 38},
    "L": {"bust": 38, "waist": 30, "hip": 40},
    "XL": {"bust": 40, "waist": 32, "hip": 42},
    "XXL": {"bust": 42, "waist": 34, "hip": 44},
}

SIZES = tuple(SIZE_CHART)

class UnknownUnitError(ValueError):

    def __init__(self, unit) -> None:
        super().__init__(f"Unknown unit: {unit!r}")
        self.unit = unit

def normalize_unit(unit: str) -> str:
    try:
        return UNIT_ALIASES[str(unit).strip().lower()]
    except KeyError:
        raise UnknownUnitError(unit) from None

def normalize_weight_unit(unit: str) -> str:
    try:
        return WEIGHT_ALIASES[str(unit).strip().lower()]
    except KeyError:
        raise UnknownUnitError(unit) from None

def to_number(value) -> Optional[float]:
    """Coerce ``value`` to a finite float, or ``None`` when it is absent or non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number

def convert_unit(value, from_unit: str, to_unit: str) -> float:
    number = to_number(value)
    if number is None:
        return 0
    source = normalize_unit(from_unit)
    target = normalize_unit(to_unit)
    if source == target:
        return number
    inches = number * CONVERSION_FACTORS[source]
    return inches / CONVERSION_FACTORS[target]

def convert_weight(value, from_unit: str, to_unit: str) -> float:
    number = to_number(value)
    if number is None:
        return 0
    source = normalize_weight_unit(from_unit)
    target = normalize_weight_unit(to_unit)
    if source == target:
        return number
    if source == KILOGRAMS:
        return number * POUNDS_PER_KG
    return number * KG_PER_POUND

def format_measurement(value, unit: str) -> str:
    number = to_number(value)
    if number is None:
        return ""
    precision = 1 if normalize_unit(unit) in (CENTIMETERS, METERS) else 2
    return f"{number:.{precision}f}"

@dataclass(frozen=True)
class MeasurementCheck:
    is_valid: bool
    message: str = ""

    def as_dict(self) -> dict:
        return {"isValid": self.is_valid, "message": self.message}

def validate_measurement(value, measurement_type: str, unit: str = INCHES) -> MeasurementCheck:
    number = to_number(value)
    if number is None:
        return MeasurementCheck(True)

    if number <= 0:
        return MeasurementCheck(False, "Measurement must be positive")

    limits = VALIDATION_RANGES.get(measurement_type)
    if limits is None:
        return MeasurementCheck(True)

    in_inches = convert_unit(number, unit, INCHES)
    low, high = limits
    if low <= in_inches <= high:
        return MeasurementCheck(True)

    symbol = UNIT_SYMBOLS[normalize_unit(unit)]
    low_display = format_measurement(convert_unit(low, INCHES, unit), unit)
    high_display = format_measurement(convert_unit(high, INCHES, unit), unit)
    return MeasurementCheck(
        False,
        f'{measurement_type} should be between {low}" and {high}" '
        f"({low_display}{symbol} - {high_display}{symbol})",
    )

def get_measurement_suggestion(measurement_type: str, size: str, unit: str = INCHES) -> Optional[float]:
    chart = SIZE_CHART.get(str(size).upper())
    if not chart or measurement_type not in chart:
        return None
    return convert_unit(chart[measurement_type], INCHES, unit)

@dataclass(frozen=True)
class BMIResult:
    bmi: float
    category: str
    height_in_meters: float
    weight_in_kg: float

    def as_dict(self) -> dict:
        return asdict(self)

def bmi_category(bmi: float) -> str:
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Normal weight"
    if bmi < 30:
        return "Overweight"
    return "Obese"

def body_mass_index(height, height_unit: str, weight_lbs) -> Optional[float]:
    """Unrounded BMI, or None when height or weight is missing or not positive."""
    height_value = to_number(height)
    weight_value = to_number(weight_lbs)
    if height_value is None or weight_value is None:
        return None
    if height_value <= 0 or weight_value <= 0:
        return None

    height_in_meters = convert_unit(height_value, height_unit, METERS)
    if height_in_meters <= 0:
        return None
    return weight_value * KG_PER_POUND / (height_in_meters * height_in_meters)

def calculate_bmi(height, height_unit: str, weight_lbs) -> Optional[BMIResult]:
    bmi = body_mass_index(height, height_unit, weight_lbs)
    if bmi is None:
        return None

    height_in_meters = convert_unit(height, height_unit, METERS)
    weight_in_kg = to_number(weight_lbs) * KG_PER_POUND

    return BMIResult(
        bmi=round(bmi, 1),
        category=bmi_category(bmi),
        height_in_meters=round(height_in_meters, 2),
        weight_in_kg=round(weight_in_kg, 1),
    )
