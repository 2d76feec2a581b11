"""Electrical Quantity Calculations.

Ohm's law and AC power relations used to derive missing measurement
channels. Phase angles are given in degrees. Undefined results are None.
"""

from typing import Any, Optional

import numpy as np

from .statistics import is_finite_number


def calculate_resistance(voltage: Any, current: Any) -> Optional[float]:
    """Resistance R = V / I (None when I = 0)."""
    if not is_finite_number(voltage) or not is_finite_number(current):
        return None
    if current == 0:
        return None
    return voltage / current


def calculate_power(voltage: Any, current: Any) -> Optional[float]:
    """DC power P = V × I."""
    if not is_finite_number(voltage) or not is_finite_number(current):
        return None
    return voltage * current


def calculate_apparent_power(voltage: Any, current: Any) -> Optional[float]:
    """Apparent power S = V × I."""
    return calculate_power(voltage, current)


def calculate_real_power(voltage: Any, current: Any, power_factor: Any) -> Optional[float]:
    """Real power P = V × I × PF."""
    apparent_power = calculate_apparent_power(voltage, current)
    if apparent_power is None or not is_finite_number(power_factor):
        return None
    return apparent_power * power_factor


def calculate_reactive_power(voltage: Any, current: Any, phase_angle: Any) -> Optional[float]:
    """Reactive power Q = V × I × sin(φ)."""
    apparent_power = calculate_apparent_power(voltage, current)
    if apparent_power is None or not is_finite_number(phase_angle):
        return None
    return apparent_power * float(np.sin(np.deg2rad(phase_angle)))


def calculate_power_factor(phase_angle: Any) -> Optional[float]:
    """Power factor cos(φ)."""
    if not is_finite_number(phase_angle):
        return None
    return float(np.cos(np.deg2rad(phase_angle)))
