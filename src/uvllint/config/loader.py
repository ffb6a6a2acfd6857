from __future__ import annotations

import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import cast

from uvllint.config.types import LintConfig, ReportConfig, RulesConfig

DEFAULT_CONFIG_NAME = "uvllint.toml"

_CODE_RE = re.compile(r"UVL\d{4}")


def discover_config_path(*, model_path: Path, explicit_config: Path | None) -> Path | None:
    if explicit_config is not None:
        return explicit_config
    candidate = model_path.parent / DEFAULT_CONFIG_NAME
    if candidate.is_file():
        return candidate
    return None


def load_config(path: str | Path) -> LintConfig:
    config_path = Path(path)
    with config_path.open("rb") as f:
        payload = tomllib.load(f)

    root = cast(Mapping[str, object], payload)
    schema_version = root.get("schema_version")
    if not isinstance(schema_version, str):
        raise ValueError("`schema_version` must be a string")
    if schema_version != "1":
        raise ValueError('`schema_version` must be "1"')

    unknown = sorted(set(root) - {"schema_version", "rules", "report"})
    if unknown:
        raise ValueError(f"unknown top-level key(s): {', '.join(unknown)}")

    return LintConfig(
        schema_version=schema_version,
        rules=_parse_rules(root.get("rules", {}), path="rules"),
        report=_parse_report(root.get("report", {}), path="report"),
    )


def _parse_rules(raw: object, *, path: str) -> RulesConfig:
    table = _require_table(raw, path=path)
    disable_raw = table.get("disable", [])
    if not isinstance(disable_raw, list):
        raise ValueError(f"`{path}.disable` must be a list of diagnostic codes")
    codes: list[str] = []
    for idx, code in enumerate(disable_raw):
        if not isinstance(code, str) or not _CODE_RE.fullmatch(code):
            raise ValueError(f"`{path}.disable[{idx}]` must be a code like `UVL2105`")
        codes.append(code)
    return RulesConfig(disable=tuple(dict.fromkeys(codes)))


def _parse_report(raw: object, *, path: str) -> ReportConfig:
    table = _require_table(raw, path=path)
    show_fixes = table.get("show_fixes", True)
    if not isinstance(show_fixes, bool):
        raise ValueError(f"`{path}.show_fixes` must be a boolean")
    return ReportConfig(show_fixes=show_fixes)


def _require_table(raw: object, *, path: str) -> Mapping[str, object]:
    if not isinstance(raw, Mapping):
        raise ValueError(f"`{path}` must be a table")
    return cast(Mapping[str, object], raw)
