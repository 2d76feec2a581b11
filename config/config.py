"""Configuration file for PV Disconnect Compliance Testing.

Environment variables, ingestion thresholds, and logging setup.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional

# ============================================================================
# PATHS
# ============================================================================
BASE_DIR = Path(__file__).resolve().parent.parent

# ============================================================================
# APPLICATION SETTINGS
# ============================================================================
APP_CONFIG: Dict[str, Any] = {
    "app_name": "PV Disconnect Compliance Testing",
    "version": "1.0.0",
    "debug": os.getenv("DEBUG", "False").lower() == "true",
    "log_level": os.getenv("LOG_LEVEL", "INFO"),
}

# ============================================================================
# FILE UPLOAD SETTINGS
# ============================================================================
UPLOAD_CONFIG: Dict[str, Any] = {
    "max_file_size_mb": float(os.getenv("PV_MAX_UPLOAD_MB", 10)),
    "allowed_extensions": [".xlsx", ".xls", ".csv"],
    "allowed_media_types": [
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-excel",
        "text/csv",
    ],
}

# ============================================================================
# INGESTION SETTINGS
# ============================================================================
INGESTION_CONFIG: Dict[str, Any] = {
    # Batch is rejected when errors exceed this fraction of rows seen
    "error_rate_threshold": float(os.getenv("PV_ERROR_RATE_THRESHOLD", 0.10)),
    "rejection_error_preview": 10,
    "warning_error_preview": 5,
    "upload_preview_rows": 10,
    "default_header_row": 0,
}

# ============================================================================
# ANALYSIS SETTINGS
# ============================================================================
ANALYSIS_CONFIG: Dict[str, Any] = {
    "outlier_iqr_multiplier": float(os.getenv("PV_OUTLIER_IQR_MULTIPLIER", 1.5)),
    "stability_std_ratio": 0.1,  # std-dev above 10% of mean flags instability
}

# ============================================================================
# EXPORT SETTINGS
# ============================================================================
EXPORT_CONFIG: Dict[str, Any] = {
    "data_sheet_name": "Data",
    "session_info_sheet": "Session Info",
    "measurements_sheet": "Measurements",
    "analysis_sheet": "Analysis",
    "export_formats": ["xlsx", "csv"],
}

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Install a root handler at the configured log level.

    Args:
        level: Level name overriding ``APP_CONFIG["log_level"]``
    """
    level_name = (level or APP_CONFIG["log_level"]).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
