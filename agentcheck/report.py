"""
report.py

Responsibility: Collect the outcome of a validation run.

A report is an ordered list of check results grouped into sections. Suites
append to it and never print; rendering lives in `renderer.py`.

Counting rules:
- `total` counts only pass + fail (warnings and skips are informational).
- A report is ok when no check failed; `exit_code` is 0 or 1 accordingly.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class CheckStatus(str, enum.Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"
    SKIP = "skip"


class AbortValidation(RuntimeError):
    """A prerequisite failed; the remaining checks of the suite cannot run."""


@dataclass(frozen=True)
class CheckResult:
    status: CheckStatus
    message: str
    hint: str | None = None
    section: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "hint": self.hint,
            "section": self.section,
        }


@dataclass
class ValidationReport:
    title: str
    results: list[CheckResult] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    action_items: list[str] = field(default_factory=list)
    aborted: bool = False
    _section: str | None = field(default=None, init=False, repr=False)
    _notes_by_section: dict[str | None, list[str]] = field(default_factory=dict, init=False, repr=False)
    _section_order: list[str | None] = field(default_factory=list, init=False, repr=False)

    # -- recording -----------------------------------------------------

    def section(self, name: str) -> None:
        self._section = name
        if name not in self._section_order:
            self._section_order.append(name)

    def _add(self, status: CheckStatus, message: str, hint: str | None = None) -> CheckResult:
        result = CheckResult(status=status, message=message, hint=hint, section=self._section)
        self.results.append(result)
        return result

    def passed(self, message: str) -> CheckResult:
        return self._add(CheckStatus.PASS, message)

    def failed(self, message: str, hint: str | None = None) -> CheckResult:
        return self._add(CheckStatus.FAIL, message, hint)

    def warned(self, message: str, hint: str | None = None) -> CheckResult:
        return self._add(CheckStatus.WARN, message, hint)

    def skipped(self, message: str) -> CheckResult:
        return self._add(CheckStatus.SKIP, message)

    def note(self, message: str) -> None:
        """Informational line attached to the current section (not a check)."""
        self.notes.append(message)
        self._notes_by_section.setdefault(self._section, []).append(message)

    def expect(
        self,
        condition: bool,
        ok_message: str,
        fail_message: str,
        hint: str | None = None,
        *,
        severity: CheckStatus = CheckStatus.FAIL,
    ) -> bool:
        """
        Record a pass when `condition` holds, otherwise a failure (or a warning
        when `severity` is WARN). Returns the condition for chaining.
        """
        if condition:
            self.passed(ok_message)
        elif severity is CheckStatus.WARN:
            self.warned(fail_message, hint)
        else:
            self.failed(fail_message, hint)
        return bool(condition)

    def abort(self, message: str, hint: str | None = None) -> None:
        self.failed(message, hint)
        self.aborted = True
        raise AbortValidation(message)

    # -- counters ------------------------------------------------------

    def _count(self, status: CheckStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    @property
    def passed_count(self) -> int:
        return self._count(CheckStatus.PASS)

    @property
    def failed_count(self) -> int:
        return self._count(CheckStatus.FAIL)

    @property
    def warning_count(self) -> int:
        return self._count(CheckStatus.WARN)

    @property
    def skipped_count(self) -> int:
        return self._count(CheckStatus.SKIP)

    @property
    def total(self) -> int:
        return self.passed_count + self.failed_count

    @property
    def ok(self) -> bool:
        return self.failed_count == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def sections(self) -> list[tuple[str | None, list[CheckResult]]]:
        """Results grouped by section, in first-seen order."""
        grouped: dict[str | None, list[CheckResult]] = {name: [] for name in self._section_order}
        for r in self.results:
            grouped.setdefault(r.section, []).append(r)
        return list(grouped.items())

    def notes_for(self, section: str | None) -> list[str]:
        return list(self._notes_by_section.get(section, []))

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "ok": self.ok,
            "aborted": self.aborted,
            "counts": {
                "total": self.total,
                "passed": self.passed_count,
                "failed": self.failed_count,
                "warnings": self.warning_count,
                "skipped": self.skipped_count,
            },
            "results": [r.to_dict() for r in self.results],
            "notes": list(self.notes),
            "action_items": list(self.action_items) if not self.ok else [],
        }
