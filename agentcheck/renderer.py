"""
renderer.py

Responsibility: Turn reports into text for humans (Jinja2 templates bundled
in `agentcheck/templates/`) or JSON for CI tooling.

Rules:
- Rendering never changes a report; it only reads counters and results.
- ANSI color codes are injected through the template context and are empty
  strings when color is disabled, so templates stay identical either way.
- StrictUndefined: a typo in a template is a RenderError, not blank output.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from agentcheck.report import ValidationReport

BOX_WIDTH = 49

COLORS = {
    "red": "\033[0;31m",
    "green": "\033[0;32m",
    "yellow": "\033[1;33m",
    "blue": "\033[0;34m",
    "nc": "\033[0m",
}

# status -> (symbol, color)
STYLES = {
    "pass": ("✓", "green"),
    "fail": ("✗", "red"),
    "warn": ("⚠", "yellow"),
    "skip": ("⊘", "yellow"),
}


class RenderError(RuntimeError):
    pass


@dataclass(frozen=True)
class VersionRow:
    platform: str
    documented: str
    sdk: str
    release: str | None = None

    @property
    def match(self) -> bool:
        return self.documented == self.sdk


def _boxed(text: str) -> str:
    return str(text)[:BOX_WIDTH].ljust(BOX_WIDTH)


def _palette(color: bool) -> dict[str, str]:
    return dict(COLORS) if color else {k: "" for k in COLORS}


def _environment() -> Environment:
    env = Environment(
        loader=PackageLoader("agentcheck", "templates"),
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["boxed"] = _boxed
    return env


def _render(template_name: str, context: dict[str, Any]) -> str:
    try:
        template = _environment().get_template(template_name)
        return template.render(**context)
    except TemplateError as e:
        raise RenderError(f"Failed rendering template: {template_name}") from e


def render_text(report: ValidationReport, *, color: bool = False) -> str:
    return _render("report.txt.j2", {"report": report, "c": _palette(color), "styles": STYLES})


def render_versions(rows: list[VersionRow], *, color: bool = False) -> str:
    return _render("versions.txt.j2", {"rows": rows, "c": _palette(color)})


def _dumps(data: Any) -> str:
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def render_json(payload: ValidationReport | list[ValidationReport]) -> str:
    if isinstance(payload, ValidationReport):
        return _dumps(payload.to_dict())
    return _dumps([r.to_dict() for r in payload])


def render_versions_json(rows: list[VersionRow], release_check: ValidationReport | None = None) -> str:
    """
    `release_check` is null when no --release lookup was requested; otherwise
    it holds the pass/warn/skip results of each lookup.
    """
    return _dumps(
        {
            "versions": [_row_dict(row) for row in rows],
            "release_check": release_check.to_dict() if release_check is not None else None,
        }
    )


def _row_dict(item: VersionRow) -> dict[str, Any]:
    return {
        "platform": item.platform,
        "documented": item.documented,
        "sdk": item.sdk,
        "release": item.release,
        "match": item.match,
    }
