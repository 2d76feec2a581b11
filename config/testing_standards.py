"""Testing Standards Parameters and Constants.

IEC 60947-3: Low-voltage switchgear - Switches, disconnectors, switch-disconnectors
UL 98B: Enclosed and dead-front switches for use in photovoltaic systems
IEC 62271-100: High-voltage switchgear - Alternating-current circuit-breakers
ANSI C37.06: AC high-voltage circuit breakers - Preferred ratings
"""

from typing import Dict, Optional
from dataclasses import dataclass
from enum import Enum


class TestingStandard(Enum):
    """Testing standards a disconnect device can be assessed against."""
    IEC_60947_3 = "IEC_60947_3"
    UL_98B = "UL_98B"
    IEC_62271_100 = "IEC_62271_100"
    ANSI_C37_06 = "ANSI_C37_06"

    @property
    def display_name(self) -> str:
        return STANDARD_DISPLAY_NAMES[self]


STANDARD_DISPLAY_NAMES: Dict[TestingStandard, str] = {
    TestingStandard.IEC_60947_3: "IEC 60947-3",
    TestingStandard.UL_98B: "UL 98B",
    TestingStandard.IEC_62271_100: "IEC 62271-100",
    TestingStandard.ANSI_C37_06: "ANSI C37.06",
}


class DeviceType(Enum):
    """PV disconnect device categories."""
    DISCONNECT_SWITCH = "disconnect_switch"
    FUSE_COMBINATION = "fuse_combination"
    SWITCH_DISCONNECTOR = "switch_disconnector"
    CIRCUIT_BREAKER = "circuit_breaker"
    LOAD_BREAK_SWITCH = "load_break_switch"


# ============================================================================
# DEFAULT COMPLIANCE CRITERIA PER STANDARD
# ============================================================================

@dataclass(frozen=True)
class StandardCriteria:
    """Default acceptance thresholds for a testing standard.

    Percentages are expressed in percent (95.0 means 95 %).
    """
    min_pass_rate: float = 95.0
    max_voltage_deviation: float = 10.0
    max_current_deviation: float = 10.0
    # Upper limit of measured max value as a multiple of the device rating
    rating_overload_factor: float = 1.1
    # Minimum number of measurements for an endurance test, if required
    min_measurements: Optional[int] = None


STANDARD_CRITERIA: Dict[TestingStandard, StandardCriteria] = {
    TestingStandard.IEC_60947_3: StandardCriteria(),
    TestingStandard.UL_98B: StandardCriteria(min_measurements=100),
    TestingStandard.IEC_62271_100: StandardCriteria(),
    TestingStandard.ANSI_C37_06: StandardCriteria(),
}


def get_standard(identifier) -> Optional[TestingStandard]:
    """Resolve a standard from its enum value or display name.

    Args:
        identifier: TestingStandard, ``"IEC_60947_3"`` or ``"IEC 60947-3"``

    Returns:
        TestingStandard or None if not recognised
    """
    if isinstance(identifier, TestingStandard):
        return identifier
    if identifier is None:
        return None

    normalized = str(identifier).strip().upper()
    for standard in TestingStandard:
        if standard.value == normalized:
            return standard
        if standard.display_name.upper() == normalized:
            return standard
    return None


def get_standard_criteria(identifier) -> StandardCriteria:
    """Return default criteria for a standard, or generic defaults."""
    standard = get_standard(identifier)
    if standard is None:
        return StandardCriteria()
    return STANDARD_CRITERIA[standard]
