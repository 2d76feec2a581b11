"""PV Disconnect Analysis Module.

Statistics and compliance tools for disconnect-device test sessions.

Modules:
- statistics: Descriptive statistics, percentiles, Tukey outliers, deviation
- electrical: Resistance, DC/AC power and power factor
- session_stats: Session summary projection (counts, pass rate, channels)
- compliance: Criteria verdicts, standard requirement checks, recommendations
"""

from .statistics import (
    Quartiles,
    OutlierResult,
    ValueRange,
    TestDuration,
    calculate_mean,
    calculate_median,
    calculate_mode,
    calculate_variance,
    calculate_standard_deviation,
    calculate_coefficient_of_variation,
    calculate_range,
    calculate_percentile,
    calculate_quartiles,
    calculate_iqr,
    detect_outliers,
    calculate_deviation,
    is_within_tolerance,
    calculate_pass_rate,
    calculate_test_duration,
    calculate_sampling_rate,
)
from .electrical import (
    calculate_resistance,
    calculate_power,
    calculate_apparent_power,
    calculate_real_power,
    calculate_reactive_power,
    calculate_power_factor,
)
from .session_stats import (
    ChannelStatistics,
    SessionStatistics,
    compute_session_statistics,
)
from .compliance import (
    DeviceRating,
    ComplianceCriteria,
    ComplianceVerdict,
    RequirementResult,
    assess,
    assess_standard_requirements,
    generate_recommendations,
)

__all__ = [
    # Statistics
    "Quartiles",
    "OutlierResult",
    "ValueRange",
    "TestDuration",
    "calculate_mean",
    "calculate_median",
    "calculate_mode",
    "calculate_variance",
    "calculate_standard_deviation",
    "calculate_coefficient_of_variation",
    "calculate_range",
    "calculate_percentile",
    "calculate_quartiles",
    "calculate_iqr",
    "detect_outliers",
    "calculate_deviation",
    "is_within_tolerance",
    "calculate_pass_rate",
    "calculate_test_duration",
    "calculate_sampling_rate",
    # Electrical
    "calculate_resistance",
    "calculate_power",
    "calculate_apparent_power",
    "calculate_real_power",
    "calculate_reactive_power",
    "calculate_power_factor",
    # Session statistics
    "ChannelStatistics",
    "SessionStatistics",
    "compute_session_statistics",
    # Compliance
    "DeviceRating",
    "ComplianceCriteria",
    "ComplianceVerdict",
    "RequirementResult",
    "assess",
    "assess_standard_requirements",
    "generate_recommendations",
]
