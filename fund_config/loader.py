"""
Configuration Loader (``fund_config.loader``).

Responsibility
--------------
Loads a YAML report-schema set and parses it into the frozen
``fund_config.schema`` dataclasses, checking the structural rules the
compiler relies on.

Invariants enforced
-------------------
* ``known_forms`` entries are unique.
* Every flag names a known sheet and form, lies inside
  ``[0, flag_length)`` and no two sheets share a position. Profile and
  summary sit at positions 0 and 1.
* Thresholds are positive integers. Counterpart rules of one form agree
  on their cutoff, and ``form_thresholds`` never repeats such a form.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  parsed document for configuration identity.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Structural rule violated  -> ``InvalidReportConfigError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from fund_config.schema import (
    FIXED_FLAG_POSITIONS,
    FLAG_SHEETS,
    CounterpartRule,
    FlagPosition,
    HeadEntry,
    PartyPlaceholder,
    ReportSchema,
    TextLimits,
)
from fund_kernel.exceptions import InvalidReportConfigError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_placeholder(data: dict[str, Any]) -> PartyPlaceholder:
    """Parse a PartyPlaceholder from a dict."""
    return PartyPlaceholder(
        name=str(data.get("name", "")),
        address=str(data.get("address", "")),
        occupation=str(data.get("occupation", "")),
    )


def parse_counterpart_rule(data: dict[str, Any]) -> CounterpartRule:
    """Parse a CounterpartRule; ``threshold`` may be null."""
    threshold = data.get("threshold")
    return CounterpartRule(
        transaction_type=data["transaction_type"],
        category_key=data["category_key"],
        form_id=data["form_id"],
        threshold=int(threshold) if threshold is not None else None,
    )


def parse_report_schema(data: dict[str, Any], source: str = "<dict>") -> ReportSchema:
    """
    Parse and check a ``ReportSchema`` from a dict.

    Raises:
        KeyError: if required keys are missing.
        InvalidReportConfigError: if a structural rule is violated.
    """
    flags = data["presence_flags"]
    flag_length = int(flags["length"])

    schema = ReportSchema(
        schema_id=data["schema_id"],
        version=int(data.get("version", 1)),
        description=str(data.get("description", "")).strip(),
        xml_head=tuple(
            HeadEntry(tag=h["tag"], value=str(h["value"])) for h in data["xml_head"]
        ),
        known_forms=tuple(data["known_forms"]),
        flag_length=flag_length,
        flag_positions=tuple(
            FlagPosition(
                sheet=p["sheet"],
                form_id=p["form_id"],
                position=int(p["position"]),
            )
            for p in flags.get("positions", [])
        ),
        counterpart_rules=tuple(
            parse_counterpart_rule(r) for r in data.get("counterpart_detail", [])
        ),
        form_thresholds=tuple(
            (form_id, int(value))
            for form_id, value in data.get("form_thresholds", {}).items()
        ),
        text_limits=TextLimits(**data.get("text_limits", {})),
        donor_placeholder=parse_placeholder(data["placeholders"]["donor"]),
        counterpart_placeholder=parse_placeholder(data["placeholders"]["counterpart"]),
        grant_expenditure_labels=tuple(data.get("grant_expenditure_labels", {}).items()),
        checksum=compute_checksum(data),
    )
    _check_schema(schema, source)
    return schema


def load_report_schema(path: Path) -> ReportSchema:
    """Load a YAML schema set from ``path`` and parse it."""
    return parse_report_schema(load_yaml_file(path), source=str(path))


def _check_schema(schema: ReportSchema, source: str) -> None:
    if len(set(schema.known_forms)) != len(schema.known_forms):
        raise InvalidReportConfigError(source, "known_forms contains duplicates")
    _check_flag_positions(schema, source)
    _check_thresholds(schema, source)


def _check_flag_positions(schema: ReportSchema, source: str) -> None:
    seen: dict[int, str] = {}
    sheets: dict[str, int] = {}
    for entry in schema.flag_positions:
        if entry.sheet not in FLAG_SHEETS:
            raise InvalidReportConfigError(source, f"unknown flag sheet {entry.sheet}")
        if entry.sheet in sheets:
            raise InvalidReportConfigError(source, f"flag sheet {entry.sheet} listed twice")
        if entry.form_id not in schema.known_forms:
            raise InvalidReportConfigError(
                source, f"flag sheet {entry.sheet} references unknown form {entry.form_id}"
            )
        if not 0 <= entry.position < schema.flag_length:
            raise InvalidReportConfigError(
                source,
                f"flag position {entry.position} for {entry.sheet} is outside "
                f"0..{schema.flag_length - 1}",
            )
        if entry.position in seen:
            raise InvalidReportConfigError(
                source,
                f"flag position {entry.position} shared by {seen[entry.position]} "
                f"and {entry.sheet}",
            )
        seen[entry.position] = entry.sheet
        sheets[entry.sheet] = entry.position

    for sheet, position in FIXED_FLAG_POSITIONS:
        if sheets.get(sheet) != position:
            raise InvalidReportConfigError(
                source, f"flag sheet {sheet} must sit at position {position}"
            )


def _check_thresholds(schema: ReportSchema, source: str) -> None:
    for form_id, threshold in schema.form_thresholds:
        if threshold <= 0:
            raise InvalidReportConfigError(source, f"threshold for {form_id} must be positive")

    by_form: dict[str, int] = {}
    for rule in schema.counterpart_rules:
        if rule.form_id not in schema.known_forms:
            raise InvalidReportConfigError(
                source, f"{rule.category_key} references unknown form {rule.form_id}"
            )
        if rule.threshold is None:
            continue
        if rule.threshold <= 0:
            raise InvalidReportConfigError(
                source, f"threshold for {rule.category_key} must be positive"
            )
        if by_form.setdefault(rule.form_id, rule.threshold) != rule.threshold:
            raise InvalidReportConfigError(
                source,
                f"{rule.category_key} threshold {rule.threshold} disagrees with "
                f"{by_form[rule.form_id]} for {rule.form_id}",
            )

    overlap = sorted(set(by_form) & {form_id for form_id, _ in schema.form_thresholds})
    if overlap:
        raise InvalidReportConfigError(
            source,
            f"form_thresholds repeats a counterpart_detail cutoff for {', '.join(overlap)}",
        )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str, ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
