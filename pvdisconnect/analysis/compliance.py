"""Compliance Assessment Module.

Evaluates session statistics of a PV disconnect device test against
acceptance criteria (minimum pass rate, maximum deviation of mean voltage
and current from the device rating) and against the requirement checks of
a named testing standard.

Key features:
- Criteria assessment producing a compliant/non-compliant verdict
- Default criteria per testing standard (IEC 60947-3, UL 98B, ...)
- Itemized standard requirement checks
- Report recommendations derived from the session outcome
"""

from typing import List, Optional, Tuple
from dataclasses import dataclass, field

from config.config import ANALYSIS_CONFIG
from config.testing_standards import (
    DeviceType,
    TestingStandard,
    get_standard,
    get_standard_criteria,
)

from .session_stats import SessionStatistics
from .statistics import calculate_deviation


@dataclass(frozen=True)
class DeviceRating:
    """Nameplate ratings of the device under test."""
    rated_voltage: Optional[float] = None
    rated_current: Optional[float] = None
    device_type: Optional[DeviceType] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class ComplianceCriteria:
    """Acceptance thresholds; a None threshold is not evaluated.

    Percentages are in percent (95.0 means 95 %).
    """
    min_pass_rate: Optional[float] = None
    max_voltage_deviation: Optional[float] = None
    max_current_deviation: Optional[float] = None
    rated_voltage: Optional[float] = None
    rated_current: Optional[float] = None

    @classmethod
    def for_standard(
        cls,
        standard,
        rated_voltage: Optional[float] = None,
        rated_current: Optional[float] = None
    ) -> "ComplianceCriteria":
        """Criteria with the default thresholds of a testing standard.

        Args:
            standard: TestingStandard, enum value or display name
            rated_voltage: Device rated voltage (V)
            rated_current: Device rated current (A)
        """
        defaults = get_standard_criteria(standard)
        return cls(
            min_pass_rate=defaults.min_pass_rate,
            max_voltage_deviation=defaults.max_voltage_deviation,
            max_current_deviation=defaults.max_current_deviation,
            rated_voltage=rated_voltage,
            rated_current=rated_current,
        )


@dataclass
class ComplianceVerdict:
    """Outcome of a compliance assessment.

    ``issues`` lists violations in evaluation order: pass rate, voltage,
    current. Deviations are signed percentages.
    """
    compliant: bool
    pass_rate: Optional[float]
    voltage_deviation: Optional[float]
    current_deviation: Optional[float]
    issues: List[str] = field(default_factory=list)


def _rated_deviation(mean: Optional[float], rated: Optional[float]) -> Optional[float]:
    if rated is None or mean is None:
        return None
    return calculate_deviation(mean, rated)


def assess(statistics: SessionStatistics, criteria: ComplianceCriteria) -> ComplianceVerdict:
    """Assess session statistics against compliance criteria.

    Each criterion is evaluated independently; a value that cannot be
    computed is reported as None and raises no issue.

    Args:
        statistics: Session summary
        criteria: Thresholds and device ratings

    Returns:
        ComplianceVerdict
    """
    issues = []
    pass_rate = statistics.pass_rate

    if (
        pass_rate is not None
        and criteria.min_pass_rate is not None
        and pass_rate < criteria.min_pass_rate
    ):
        issues.append(
            f"Pass rate ({pass_rate:.1f}%) below minimum ({criteria.min_pass_rate:g}%)"
        )

    voltage_mean = statistics.voltage.mean if statistics.voltage else None
    voltage_deviation = _rated_deviation(voltage_mean, criteria.rated_voltage)
    if (
        voltage_deviation is not None
        and criteria.max_voltage_deviation is not None
        and abs(voltage_deviation) > criteria.max_voltage_deviation
    ):
        issues.append(
            f"Voltage deviation ({abs(voltage_deviation):.1f}%) exceeds maximum "
            f"({criteria.max_voltage_deviation:g}%)"
        )

    current_mean = statistics.current.mean if statistics.current else None
    current_deviation = _rated_deviation(current_mean, criteria.rated_current)
    if (
        current_deviation is not None
        and criteria.max_current_deviation is not None
        and abs(current_deviation) > criteria.max_current_deviation
    ):
        issues.append(
            f"Current deviation ({abs(current_deviation):.1f}%) exceeds maximum "
            f"({criteria.max_current_deviation:g}%)"
        )

    return ComplianceVerdict(
        compliant=len(issues) == 0,
        pass_rate=pass_rate,
        voltage_deviation=voltage_deviation,
        current_deviation=current_deviation,
        issues=issues,
    )


# ============================================================================
# STANDARD REQUIREMENT CHECKS
# ============================================================================

NOT_EVALUATED = "NOT EVALUATED"


@dataclass(frozen=True)
class RequirementResult:
    """Result of a single standard requirement check.

    ``passed`` is None when the inputs needed for the check are missing.
    """
    requirement: str
    status: str
    passed: Optional[bool]
    detail: str = ""


def _rating_check(
    requirement: str,
    measured_max: Optional[float],
    rating: Optional[float],
    factor: float,
    unit: str
) -> RequirementResult:
    if measured_max is None or rating is None:
        return RequirementResult(requirement, NOT_EVALUATED, None)

    limit = rating * factor
    passed = measured_max <= limit
    return RequirementResult(
        requirement,
        "COMPLIANT" if passed else "NON-COMPLIANT",
        passed,
        f"max {measured_max:g} {unit} vs limit {limit:g} {unit}",
    )


def _pass_rate_check(
    requirement: str,
    pass_rate: Optional[float],
    min_pass_rate: float,
    labels: Tuple[str, str]
) -> RequirementResult:
    if pass_rate is None:
        return RequirementResult(requirement, NOT_EVALUATED, None)

    passed = pass_rate >= min_pass_rate
    return RequirementResult(
        requirement,
        labels[0] if passed else labels[1],
        passed,
        f"pass rate {pass_rate:.1f}% (minimum {min_pass_rate:g}%)",
    )


def assess_standard_requirements(
    statistics: SessionStatistics,
    device: DeviceRating,
    standard
) -> List[RequirementResult]:
    """Check session results against the requirements of a testing standard.

    IEC 60947-3 checks measured maxima against 110 % of the ratings and the
    operational pass rate. UL 98B checks the endurance measurement count and
    the pass rate. Other standards get a general pass-rate check.

    Args:
        statistics: Session summary
        device: Device ratings
        standard: TestingStandard, enum value or display name

    Returns:
        Requirement results in report order
    """
    resolved = get_standard(standard)
    criteria = get_standard_criteria(resolved)
    results = []

    if resolved is TestingStandard.IEC_60947_3:
        results.append(_rating_check(
            "Voltage Rating Compliance",
            statistics.voltage.max if statistics.voltage else None,
            device.rated_voltage,
            criteria.rating_overload_factor,
            "V",
        ))
        results.append(_rating_check(
            "Current Rating Compliance",
            statistics.current.max if statistics.current else None,
            device.rated_current,
            criteria.rating_overload_factor,
            "A",
        ))
        results.append(_pass_rate_check(
            "Operational Test Result",
            statistics.pass_rate,
            criteria.min_pass_rate,
            ("PASSED", "FAILED"),
        ))

    elif resolved is TestingStandard.UL_98B:
        completed = statistics.total_measurements >= criteria.min_measurements
        results.append(RequirementResult(
            "Endurance Test",
            "COMPLETED" if completed else "INCOMPLETE",
            completed,
            f"{statistics.total_measurements} of {criteria.min_measurements} measurements",
        ))
        results.append(_pass_rate_check(
            "Operational Test Result",
            statistics.pass_rate,
            criteria.min_pass_rate,
            ("PASSED", "FAILED"),
        ))

    else:
        results.append(_pass_rate_check(
            "General Compliance",
            statistics.pass_rate,
            criteria.min_pass_rate,
            ("COMPLIANT", "NON-COMPLIANT"),
        ))

    return results


# ============================================================================
# RECOMMENDATIONS
# ============================================================================

def _is_unstable(channel, ratio: float) -> bool:
    if channel is None:
        return False
    return channel.std_dev > abs(channel.mean) * ratio


def generate_recommendations(
    statistics: SessionStatistics,
    verdict: Optional[ComplianceVerdict] = None,
    min_pass_rate: float = 95.0
) -> List[Tuple[str, str]]:
    """Build report recommendations as ordered (topic, text) pairs.

    The session counts as passing when its pass rate reaches
    ``min_pass_rate`` and, if a verdict is given, the verdict is compliant.
    """
    ratio = ANALYSIS_CONFIG["stability_std_ratio"]
    passed = statistics.pass_rate is not None and statistics.pass_rate >= min_pass_rate
    if verdict is not None:
        passed = passed and verdict.compliant

    recommendations = []

    if passed:
        recommendations.append((
            "Test Result",
            "Device meets all compliance requirements and is approved for use.",
        ))
    else:
        recommendations.append((
            "Test Result",
            "Device did not meet minimum compliance requirements. "
            "Recommend retesting after addressing identified issues.",
        ))

    if statistics.fail_count > 0:
        recommendations.append((
            "Failed Measurements",
            f"{statistics.fail_count} measurements failed. Review failure conditions "
            "and ensure device operates within specifications.",
        ))

    if _is_unstable(statistics.voltage, ratio):
        recommendations.append((
            "Voltage Stability",
            "High voltage variation detected. Consider investigating voltage regulation.",
        ))

    if _is_unstable(statistics.current, ratio):
        recommendations.append((
            "Current Stability",
            "High current variation detected. Consider investigating current stability.",
        ))

    if passed:
        next_steps = ("Device is certified for deployment. Schedule regular maintenance "
                      "as per manufacturer guidelines.")
    else:
        next_steps = "Address identified issues and schedule retesting before deployment."
    recommendations.append(("Next Steps", next_steps))

    return recommendations
