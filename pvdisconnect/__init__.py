"""PV Disconnect Device Compliance Testing.

Measurement ingestion, session statistics and compliance assessment for
photovoltaic disconnect devices tested per IEC 60947-3 and UL 98B.
"""

__version__ = "1.0.0"
