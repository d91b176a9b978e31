from __future__ import annotations

import json

from agentcheck.renderer import VersionRow, render_json, render_text, render_versions, render_versions_json
from agentcheck.report import ValidationReport


def _report() -> ValidationReport:
    r = ValidationReport(title="CloudX iOS Agent API Validation", action_items=["Re-run this validation script"])
    r.section("Validating SDK Version")
    r.note("SDK version (CLXVersion.m): 1.2.0")
    r.passed("SDK version matches documented version (1.2.0)")
    r.section("Validating Privacy APIs")
    r.warned("Missing GPP privacy API", "Privacy checker should reference setGPPString")
    return r


def test_render_text_plain() -> None:
    out = render_text(_report(), color=False)
    assert "\033[" not in out
    assert "║  CloudX iOS Agent API Validation" in out
    assert "▶ Validating SDK Version" in out
    assert "ℹ SDK version (CLXVersion.m): 1.2.0" in out
    assert "✓ SDK version matches documented version (1.2.0)" in out
    assert "⚠ Missing GPP privacy API" in out
    assert "→ Privacy checker should reference setGPPString" in out
    assert "✓ All validations passed!" in out
    assert "1 warning(s) found" in out
    assert "Action Items" not in out


def test_render_text_failure_lists_action_items() -> None:
    r = _report()
    r.failed("setIsUserConsent: method not found")
    out = render_text(r, color=False)
    assert "✗ setIsUserConsent: method not found" in out
    assert "✗ 1 validation(s) failed" in out
    assert "  1. Re-run this validation script" in out


def test_render_text_color() -> None:
    out = render_text(_report(), color=True)
    assert "\033[0;32m✓\033[0m SDK version matches" in out


def test_header_box_is_aligned() -> None:
    lines = render_text(_report(), color=False).splitlines()
    box = [line for line in lines if line.startswith(("╔", "║", "╚"))]
    assert len({len(line) for line in box}) == 1


def test_render_versions() -> None:
    rows = [VersionRow("ios", "1.2.0", "1.2.0"), VersionRow("flutter", "0.9.1", "1.0.0", release="v1.0.0")]
    out = render_versions(rows, color=False)
    assert "ios" in out and "match" in out
    assert "MISMATCH" in out
    assert "latest release=v1.0.0" in out


def test_render_json() -> None:
    data = json.loads(render_json(_report()))
    assert data["ok"] is True
    assert data["counts"]["warnings"] == 1
    data = json.loads(render_versions_json([VersionRow("ios", "1.2.0", "unknown")]))
    assert data == {
        "versions": [{"platform": "ios", "documented": "1.2.0", "sdk": "unknown", "release": None, "match": False}],
        "release_check": None,
    }
