"""
flutter.py

Responsibility: Validate the Flutter agent documents for syntax and
consistency, and (when the Flutter SDK source is available) against the
SDK's public API.

Unlike the iOS suite this never stops at the first failure: all checks run
so a single report lists everything that needs fixing. Only a missing agent
directory aborts.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from agentcheck import checks
from agentcheck.agent_parser import expected_agent_names
from agentcheck.report import AbortValidation, CheckStatus, ValidationReport
from agentcheck.sdk_version import UNKNOWN, documented_version, flutter_sdk_version

_log = logging.getLogger("agentcheck.flutter")

FAIL = CheckStatus.FAIL
WARN = CheckStatus.WARN


@dataclass(frozen=True)
class DocCheck:
    """A pattern every Flutter agent doc set is expected to mention."""

    pattern: str
    found: str
    missing: str
    hint: str
    severity: CheckStatus = FAIL


API_REFERENCES = (
    DocCheck(r"CloudX\.initialize", "Found CloudX.initialize API", "Missing CloudX.initialize API",
             "Agent docs should reference CloudX.initialize()"),
    DocCheck(r"CloudXBannerView", "Found CloudXBannerView widget", "Missing CloudXBannerView widget",
             "Agent docs should reference CloudXBannerView"),
    DocCheck(r"CloudXMRECView", "Found CloudXMRECView widget", "Missing CloudXMRECView widget",
             "Agent docs should reference CloudXMRECView", WARN),
    DocCheck(r"CloudXAdViewListener", "Found CloudXAdViewListener", "Missing CloudXAdViewListener",
             "Agent docs should reference CloudXAdViewListener"),
    DocCheck(r"CloudXInterstitialListener", "Found CloudXInterstitialListener", "Missing CloudXInterstitialListener",
             "Agent docs should reference CloudXInterstitialListener"),
    DocCheck(r"destroyAd", "Found destroyAd() lifecycle method", "Missing destroyAd() lifecycle method",
             "Agent docs should emphasize destroyAd() calls"),
    DocCheck(r"allowIosExperimental.*true", "Found allowIosExperimental flag", "Missing allowIosExperimental flag",
             "Agent docs should include allowIosExperimental: true for iOS"),
)

PRIVACY_REFERENCES = (
    DocCheck(r"setCCPAPrivacyString", "Found CCPA privacy API", "Missing CCPA privacy API",
             "Privacy checker should reference setCCPAPrivacyString", WARN),
    DocCheck(r"setGPPString", "Found GPP privacy API", "Missing GPP privacy API",
             "Privacy checker should reference setGPPString", WARN),
    DocCheck(r"setIsAgeRestrictedUser", "Found COPPA privacy API", "Missing COPPA privacy API",
             "Privacy checker should reference setIsAgeRestrictedUser", WARN),
)

FLUTTER_PATTERNS = (
    DocCheck(r"StatefulWidget", "Found StatefulWidget pattern", "Missing StatefulWidget pattern",
             "Agent docs should show StatefulWidget lifecycle", WARN),
    DocCheck(r"dispose\(\)", "Found dispose() lifecycle method", "Missing dispose() method",
             "Agent docs MUST emphasize dispose() for cleanup"),
    DocCheck(r"mounted", "Found mounted check pattern", "Missing mounted check",
             "Agent docs should show 'if (mounted)' before setState", WARN),
    DocCheck(r"async.*await", "Found async/await pattern", "Missing async/await pattern",
             "Agent docs MUST show async/await for CloudX APIs"),
    DocCheck(r"Future<void>", "Found Future<void> pattern", "Missing Future<void> pattern",
             "Agent docs should show Future<void> for async methods", WARN),
)

BUILD_COMMANDS = (
    DocCheck(r"flutter pub get", "Found flutter pub get command", "Missing flutter pub get",
             "Build verifier should reference 'flutter pub get'"),
    DocCheck(r"flutter analyze", "Found flutter analyze command", "Missing flutter analyze",
             "Build verifier should reference 'flutter analyze'", WARN),
    DocCheck(r"flutter build apk|flutter build appbundle", "Found Android build commands",
             "Missing Android build commands", "Build verifier should reference 'flutter build apk'"),
    DocCheck(r"flutter build ios", "Found iOS build command", "Missing iOS build command",
             "Build verifier should reference 'flutter build ios'", WARN),
)

# (pattern, found, missing, hint) checked against lib/cloudx.dart
SDK_API = (
    (r"class CloudX", "CloudX class exists in SDK", "CloudX class not found in SDK", "Check if SDK structure changed"),
    (r"static.*initialize", "initialize() method exists in SDK", "initialize() method not found",
     "Check if method was renamed"),
    (r"createBanner", "createBanner() method exists in SDK", "createBanner() method not found",
     "Check if method was renamed"),
    (r"createInterstitial", "createInterstitial() method exists in SDK", "createInterstitial() method not found",
     "Check if method was renamed"),
    (r"destroyAd", "destroyAd() method exists in SDK", "destroyAd() method not found",
     "Critical lifecycle method missing!"),
)

_CLOUDX_CALL = re.compile(r"CloudX\..*\(")
_AWAITED = re.compile(r"await|Future")
_COMMENT_OR_FENCE = re.compile(r"//|#|```")
MAX_UNAWAITED_LINES = 5

ACTION_ITEMS = [
    "Ensure all critical APIs are referenced in agent docs",
    "Check for typos in API names",
    "Verify agent files exist and are named correctly",
    "Update agent docs to match current Flutter SDK version",
]


@dataclass(frozen=True)
class FlutterPaths:
    sdk_dir: Path
    agents_dir: Path
    version_file: Path

    @property
    def agent_dir(self) -> Path:
        return self.agents_dir / "flutter"

    @property
    def cloudx_dart(self) -> Path:
        return self.sdk_dir / "lib" / "cloudx.dart"

    @property
    def banner_view(self) -> Path:
        return self.sdk_dir / "lib" / "widgets" / "cloudx_banner_view.dart"


def _run_doc_checks(r: ValidationReport, agent_dir: Path, items: tuple[DocCheck, ...]) -> None:
    for c in items:
        r.expect(
            checks.tree_contains(agent_dir, c.pattern, "*.md"),
            c.found,
            c.missing,
            c.hint,
            severity=c.severity,
        )


def _check_agent_files(r: ValidationReport, p: FlutterPaths) -> None:
    r.section("Checking Flutter Agent Files")

    if not p.agent_dir.is_dir():
        r.abort("Agent directory not found", f"Expected: {p.agent_dir}")

    for agent in expected_agent_names("flutter"):
        path = p.agent_dir / f"{agent}.md"
        r.expect(
            path.is_file(),
            f"Agent file exists: {agent}.md",
            f"Agent file missing: {agent}.md",
            f"Expected at {path}",
        )


def unawaited_cloudx_calls(agent_dir: str | Path) -> list[checks.Match]:
    """
    Lines in the agent docs that call a CloudX API without `await`.

    Lines mentioning `Future`, comments and code fences are ignored; only the
    first few offenders are returned.
    """
    out: list[checks.Match] = []
    for m in checks.tree_matches(agent_dir, _CLOUDX_CALL, "*.md"):
        if _AWAITED.search(m.line) or _COMMENT_OR_FENCE.search(m.line):
            continue
        out.append(m)
        if len(out) >= MAX_UNAWAITED_LINES:
            break
    return out


def _check_deprecated_patterns(r: ValidationReport, p: FlutterPaths) -> None:
    r.section("Checking for Deprecated/Incorrect Patterns")

    offenders = unawaited_cloudx_calls(p.agent_dir)
    for m in offenders:
        r.note(f"{m.path.name}:{m.lineno}: {m.line.strip()}")
    if offenders:
        r.warned("Found CloudX calls without await", "All CloudX async methods should use 'await'")


def _check_sdk_source(r: ValidationReport, p: FlutterPaths) -> None:
    r.section("Validating Against Flutter SDK Source")

    if p.cloudx_dart.is_file():
        r.passed("Found CloudX SDK main file")
        for pattern, found, missing, hint in SDK_API:
            r.expect(checks.file_contains(p.cloudx_dart, pattern), found, missing, hint)
    else:
        r.warned("CloudX SDK main file not found", f"Expected at {p.cloudx_dart}")

    banner = p.banner_view.is_file() or checks.tree_contains(p.sdk_dir / "lib", r"class CloudXBannerView")
    r.expect(
        banner,
        "CloudXBannerView widget exists in SDK",
        "CloudXBannerView widget not found",
        "Check if widget was moved or renamed",
        severity=WARN,
    )

    sdk = flutter_sdk_version(p.sdk_dir)
    if sdk == UNKNOWN:
        r.skipped("pubspec.yaml version not found (version check skipped)")
        return
    doc = documented_version(p.version_file, "flutter")
    r.note(f"SDK version (pubspec.yaml): {sdk}")
    r.note(f"Documented version (SDK_VERSION.yaml): {doc}")
    r.expect(
        sdk == doc,
        f"SDK version matches documented version ({sdk})",
        f"SDK version mismatch: SDK={sdk}, Docs={doc}",
        "Update SDK_VERSION.yaml if SDK version changed",
    )


def validate_flutter(
    *,
    sdk_dir: str | Path,
    agents_dir: str | Path,
    version_file: str | Path,
) -> ValidationReport:
    """
    Run the Flutter agent validation checklist.

    Without the SDK source only the agent-doc checks run; the report carries
    a note explaining how to point FLUTTER_SDK_DIR at a checkout.
    """
    paths = FlutterPaths(sdk_dir=Path(sdk_dir), agents_dir=Path(agents_dir), version_file=Path(version_file))
    report = ValidationReport(title="CloudX Flutter Agent Documentation Validation")
    report.action_items = list(ACTION_ITEMS)

    sdk_available = paths.sdk_dir.is_dir()
    report.section("Flutter SDK Source")
    if sdk_available:
        report.note(f"Flutter SDK source found: {paths.sdk_dir}")
        report.note("Running full validation (agent docs + SDK API)")
    else:
        report.note(f"Flutter SDK source not found at: {paths.sdk_dir}")
        report.note("Running agent doc validation only (syntax & consistency)")
        report.note("To validate against SDK APIs, set FLUTTER_SDK_DIR environment variable:")
        report.note("export FLUTTER_SDK_DIR=/path/to/cloudx-flutter/cloudx_flutter_sdk")
    _log.debug("flutter sdk_available=%s dir=%s", sdk_available, paths.sdk_dir)

    try:
        _check_agent_files(report, paths)
    except AbortValidation as e:
        _log.info("Flutter validation aborted: %s", e)
        return report

    report.section("Checking Critical API References")
    _run_doc_checks(report, paths.agent_dir, API_REFERENCES)

    report.section("Checking Privacy API References")
    _run_doc_checks(report, paths.agent_dir, PRIVACY_REFERENCES)

    report.section("Checking Flutter-Specific Patterns")
    _run_doc_checks(report, paths.agent_dir, FLUTTER_PATTERNS)

    report.section("Checking Build Command References")
    _run_doc_checks(report, paths.agent_dir, BUILD_COMMANDS)

    _check_deprecated_patterns(report, paths)

    if sdk_available:
        _check_sdk_source(report, paths)

    return report
