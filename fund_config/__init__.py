"""
fund_config -- single public entrypoint for report format configuration.

Responsibility:
    Provides the ONLY way to obtain the report schema at runtime through
    ``get_report_schema()``. The returned ``ReportSchema`` is immutable and
    is injected into the compiler; no report module reads YAML itself.

Failure modes:
    - ``FileNotFoundError`` -- no schema set with the requested id.
    - ``InvalidReportConfigError`` -- structural validation failed.
"""

from __future__ import annotations

from pathlib import Path

from fund_config.loader import load_report_schema
from fund_config.schema import ReportSchema
from fund_kernel.logging_config import get_logger

logger = get_logger("config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
DEFAULT_SCHEMA_SET = "syuushi_2008"


def get_report_schema(
    schema_set: str = DEFAULT_SCHEMA_SET,
    config_dir: Path | None = None,
) -> ReportSchema:
    """Load the named schema set.

    Guarantees:
        - The returned schema has passed the loader's structural checks.
        - A ``report_schema_loaded`` log entry carries the schema id,
          version and checksum.
    """
    directory = config_dir or _DEFAULT_CONFIG_DIR
    schema = load_report_schema(directory / f"{schema_set}.yaml")
    logger.info("report_schema_loaded", extra={
        "schema_id": schema.schema_id,
        "schema_version": schema.version,
        "checksum": schema.checksum,
        "known_forms": len(schema.known_forms),
        "flag_length": schema.flag_length,
    })
    return schema


__all__ = ["ReportSchema", "get_report_schema", "DEFAULT_SCHEMA_SET"]
