#!/usr/bin/env python3
"""Demo script for the PV Disconnect Compliance Testing package.

Demonstrates:
1. Building a measurement workbook in the laboratory template
2. Importing it with format detection and row validation
3. Compliance assessment against IEC 60947-3
"""

from datetime import datetime, timedelta

import numpy as np

from config.config import configure_logging
from config.instrument_formats import EXCEL_FORMATS
from config.testing_standards import TestingStandard
from pvdisconnect.analysis.compliance import (
    ComplianceCriteria,
    DeviceRating,
    assess,
    assess_standard_requirements,
    generate_recommendations,
)
from pvdisconnect.ingestion.export import (
    export_session_workbook,
    measurements_to_export_rows,
    write_rows_to_excel,
)
from pvdisconnect.ingestion.ingest import ingest
from pvdisconnect.ingestion.models import MeasurementRecord


def generate_sample_measurements(n: int = 120, seed: int = 7):
    """Generate sample switching-test readings around a 1000 V / 32 A rating."""
    rng = np.random.default_rng(seed)
    start = datetime(2024, 3, 18, 9, 0, 0)

    records = []
    for i in range(n):
        voltage = float(rng.normal(1000.0, 12.0))
        current = float(rng.normal(32.0, 0.6))
        records.append(MeasurementRecord(
            timestamp=start + timedelta(seconds=5 * i),
            voltage=round(voltage, 2),
            current=round(current, 3),
            temperature=round(float(rng.normal(25.0, 1.5)), 1),
            humidity=round(float(rng.uniform(40.0, 55.0)), 1),
            pass_fail=bool(rng.random() > 0.02),
        ))
    return records


def main():
    configure_logging("WARNING")

    print("=" * 70)
    print("PV Disconnect Compliance Testing - Demo")
    print("IEC 60947-3 / UL 98B")
    print("=" * 70)
    print()

    # Build workbook
    print("📊 Generating sample measurement workbook...")
    records = generate_sample_measurements()
    rows = measurements_to_export_rows(records, EXCEL_FORMATS["standard_v1"])
    workbook = write_rows_to_excel(rows)
    print(f"   Generated {len(records)} readings ({len(workbook)} bytes)")
    print()

    # Import
    print("📥 Importing workbook...")
    result = ingest(workbook, session_id="DEMO-001", filename="demo_session.xlsx")
    print(f"   Status:           {result.status.value}")
    print(f"   Detected format:  {result.metadata.detected_format.name}")
    print(f"   Rows processed:   {result.metadata.total_rows}")
    print(f"   Accepted:         {len(result.accepted)}")
    print(f"   Row errors:       {len(result.errors)}")
    print()

    stats = result.summary
    print("\n" + "=" * 70)
    print("SESSION STATISTICS")
    print("=" * 70)
    print(f"Measurements:        {stats.total_measurements}")
    print(f"Pass / Fail:         {stats.pass_count} / {stats.fail_count}")
    print(f"Pass Rate:           {stats.pass_rate:.1f} %")
    print(f"Voltage (mean±std):  {stats.voltage.mean:.2f} ± {stats.voltage.std_dev:.2f} V")
    print(f"Current (mean±std):  {stats.current.mean:.3f} ± {stats.current.std_dev:.3f} A")
    print(f"Resistance (mean):   {stats.resistance.mean:.3f} Ω")
    print(f"Power (mean):        {stats.power.mean:.1f} W")
    print(f"Test Duration:       {stats.duration.formatted}")
    print(f"Sampling Rate:       {stats.sampling_rate:.3f} samples/s")
    print()

    # Compliance
    device = DeviceRating(rated_voltage=1000.0, rated_current=32.0, name="PV-DS 1000/32")
    standard = TestingStandard.IEC_60947_3
    criteria = ComplianceCriteria.for_standard(
        standard, device.rated_voltage, device.rated_current
    )
    verdict = assess(stats, criteria)

    print("\n" + "=" * 70)
    print(f"COMPLIANCE ASSESSMENT ({standard.display_name})")
    print("=" * 70)
    print(f"Compliant:           {'YES' if verdict.compliant else 'NO'}")
    print(f"Voltage Deviation:   {verdict.voltage_deviation:+.2f} %")
    print(f"Current Deviation:   {verdict.current_deviation:+.2f} %")
    for issue in verdict.issues:
        print(f"   ⚠️ {issue}")
    print()

    for requirement in assess_standard_requirements(stats, device, standard):
        print(f"{requirement.requirement:<28} {requirement.status:<15} {requirement.detail}")
    print()

    print("Recommendations:")
    for topic, text in generate_recommendations(stats, verdict, criteria.min_pass_rate):
        print(f"   {topic}: {text}")
    print()

    report = export_session_workbook(
        result.accepted,
        stats,
        {"Session Name": "DEMO-001", "Device Model": device.name},
    )

    print("=" * 70)
    print("✅ Demo completed successfully!")
    print("=" * 70)
    print(f"   Session workbook: {len(report)} bytes")
    print()


if __name__ == "__main__":
    main()
