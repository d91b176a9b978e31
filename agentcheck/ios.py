"""
ios.py

Responsibility: Validate that the iOS agent documents reference APIs that
exist in the iOS SDK checkout.

Every check is a pattern presence test against `CloudXCoreAPI.h`, the
CloudXCore sources directory, or the integrator agent document. The suite
stops early only when a prerequisite (SDK dir, API header, integrator doc)
is missing.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from agentcheck import checks
from agentcheck.report import AbortValidation, ValidationReport
from agentcheck.sdk_version import UNKNOWN, documented_version, ios_sdk_version

_log = logging.getLogger("agentcheck.ios")

SOURCES_DIR = Path("core/Sources/CloudXCore")
API_HEADER = SOURCES_DIR / "CloudXCoreAPI.h"

AD_CLASSES = ("CLXBannerAdView", "CLXMRECAdView", "CLXInterstitial", "CLXRewardedAd", "CLXNativeAd")
DELEGATES = (
    "CLXBannerDelegate",
    "CLXMRECDelegate",
    "CLXInterstitialDelegate",
    "CLXRewardedDelegate",
    "CLXNativeDelegate",
)
FACTORY_METHODS = (
    "createBannerWithPlacement:",
    "createInterstitialWithPlacement:",
    "createRewardedWithPlacement:",
    "createMRECWithPlacement:",
    "createNativeWithPlacement:",
)
PRIVACY_METHODS = ("setCCPAPrivacyString:", "setIsUserConsent:", "setIsAgeRestrictedUser:")
# (pattern, label)
CALLBACKS = (
    (r"bannerDidLoad:", "bannerDidLoad:"),
    (r"bannerDidFailToLoad:.*withError:", "bannerDidFailToLoad:withError:"),
    (r"interstitialDidLoad:", "interstitialDidLoad:"),
    (r"interstitialDidFailToLoad:.*withError:", "interstitialDidFailToLoad:withError:"),
    (r"rewardedUserDidEarnReward:", "rewardedUserDidEarnReward:"),
)
# deprecated pattern -> replacement
DEPRECATED_PATTERNS = {"initWithAppKey:": "initializeSDKWithAppKey:"}

ACTION_ITEMS = [
    "Review failed checks above",
    "Update agent documentation to match current SDK APIs",
    "Update SDK_VERSION.yaml if SDK version changed",
    "Re-run this validation script",
]


@dataclass(frozen=True)
class IOSPaths:
    sdk_dir: Path
    agents_dir: Path
    version_file: Path

    @property
    def sources(self) -> Path:
        return self.sdk_dir / SOURCES_DIR

    @property
    def api_header(self) -> Path:
        return self.sdk_dir / API_HEADER

    def agent(self, role: str) -> Path:
        return self.agents_dir / "ios" / f"cloudx-ios-{role}.md"

    @property
    def integrator(self) -> Path:
        return self.agent("integrator")


def _check_prerequisites(r: ValidationReport, p: IOSPaths, which: Callable[[str], str | None]) -> None:
    r.section("Checking Prerequisites")

    if not p.sdk_dir.is_dir():
        r.abort(
            f"iOS SDK directory not found at: {p.sdk_dir}",
            "Set IOS_SDK_DIR environment variable to SDK path: export IOS_SDK_DIR=/path/to/cloudx-ios-private",
        )
    r.passed(f"iOS SDK directory found: {p.sdk_dir}")

    if not p.api_header.is_file():
        r.abort("CloudXCoreAPI.h not found in SDK", f"Expected at {p.api_header}")
    r.passed("CloudXCoreAPI.h found")

    if not p.integrator.is_file():
        r.abort(f"Integrator agent not found: {p.integrator}")
    r.passed("All agent files found")

    if which("yq"):
        r.passed("yq found (enhanced YAML parsing available)")
    else:
        r.skipped("yq not found (using built-in YAML parsing)")


def _check_sdk_version(r: ValidationReport, p: IOSPaths) -> None:
    r.section("Validating SDK Version")

    sdk = ios_sdk_version(p.sdk_dir)
    doc = documented_version(p.version_file, "ios")
    r.note(f"SDK version (CLXVersion.m): {sdk}")
    r.note(f"Documented version (SDK_VERSION.yaml): {doc}")
    _log.debug("ios versions sdk=%s doc=%s", sdk, doc)

    if sdk == doc:
        r.passed(f"SDK version matches documented version ({sdk})")
    else:
        hint = None
        if UNKNOWN in (sdk, doc):
            hint = "Could not read one of the versions; check CLXVersion.m and SDK_VERSION.yaml"
        r.failed(f"SDK version mismatch: SDK={sdk}, Docs={doc}", hint)


def _check_core_classes(r: ValidationReport, p: IOSPaths) -> None:
    r.section("Validating Core Classes")

    r.expect(
        checks.file_contains(p.api_header, r"@interface CloudXCore"),
        "CloudXCore class exists in SDK",
        "CloudXCore class not found in SDK",
    )
    for cls in AD_CLASSES:
        r.expect(
            checks.tree_contains(p.sources, rf"@interface {cls}"),
            f"{cls} class exists",
            f"{cls} class not found",
        )


def _check_delegates(r: ValidationReport, p: IOSPaths) -> None:
    r.section("Validating Delegate Protocols")

    for delegate in DELEGATES:
        r.expect(
            checks.tree_contains(p.sources, rf"@protocol {delegate}"),
            f"{delegate} protocol exists",
            f"{delegate} protocol not found",
        )


def _check_factory_methods(r: ValidationReport, p: IOSPaths) -> None:
    r.section("Validating Factory Methods")

    for method in FACTORY_METHODS:
        r.expect(
            checks.file_contains(p.api_header, checks.literal(method)),
            f"{method} method exists",
            f"{method} method not found",
        )


def _check_initialization(r: ValidationReport, p: IOSPaths) -> None:
    r.section("Validating Initialization API")

    r.expect(
        checks.file_contains(p.api_header, checks.literal("initializeSDKWithAppKey:")),
        "initializeSDKWithAppKey:completion: method exists",
        "initializeSDKWithAppKey: method not found",
    )
    singleton = checks.file_contains(p.api_header, r"\+ \(instancetype\)shared") or checks.file_contains(
        p.api_header, "sharedInstance"
    )
    r.expect(singleton, "CloudXCore singleton pattern exists", "CloudXCore singleton not found")


def _check_privacy_apis(r: ValidationReport, p: IOSPaths) -> None:
    r.section("Validating Privacy APIs")

    for method in PRIVACY_METHODS:
        r.expect(
            checks.file_contains(p.api_header, checks.literal(method)),
            f"{method} method exists",
            f"{method} method not found",
        )


def _check_delegate_callbacks(r: ValidationReport, p: IOSPaths) -> None:
    r.section("Validating Delegate Callback Signatures")

    for pattern, label in CALLBACKS:
        r.expect(
            checks.tree_contains(p.sources, pattern),
            f"{label} callback exists",
            f"{label} callback not found",
        )


def _check_show_methods(r: ValidationReport, p: IOSPaths) -> None:
    r.section("Validating Show Methods")

    r.expect(
        checks.tree_contains(p.sources, checks.literal("showFromViewController:")),
        "showFromViewController: method exists for fullscreen ads",
        "showFromViewController: method not found",
    )
    documented = checks.file_contains(p.integrator, checks.literal("show(from:")) or checks.file_contains(
        p.integrator, checks.literal("showFromViewController:")
    )
    r.expect(
        documented,
        "Agent documentation uses correct show method",
        "Agent documentation missing show(from:)/showFromViewController: pattern",
    )


def _check_view_controller_requirements(r: ValidationReport, p: IOSPaths) -> None:
    r.section("Validating UIViewController Requirements")

    r.expect(
        checks.file_contains(p.integrator, "UIViewController", ignore_case=True),
        "Agent documentation mentions UIViewController requirement",
        "Agent documentation missing UIViewController requirement",
    )
    r.expect(
        checks.file_contains(p.api_header, checks.literal("viewController:")),
        "Banner creation API includes viewController parameter",
        "Banner creation missing viewController parameter",
    )


def _check_no_deprecated_apis(r: ValidationReport, p: IOSPaths) -> None:
    r.section("Checking for Deprecated API Usage in Agents")

    found = False
    for old, new in DEPRECATED_PATTERNS.items():
        if checks.file_contains(p.integrator, checks.literal(old)):
            r.failed(f"Deprecated {old} found in integrator (should use {new})")
            found = True
    if not found:
        r.passed("No deprecated API patterns found in agent documentation")


def validate_ios(
    *,
    sdk_dir: str | Path,
    agents_dir: str | Path,
    version_file: str | Path,
    which: Callable[[str], str | None] = shutil.which,
) -> ValidationReport:
    """
    Run the full iOS validation checklist and return the report.

    A missing prerequisite marks the report as aborted (exit code 1) and the
    remaining sections are not run.
    """
    paths = IOSPaths(sdk_dir=Path(sdk_dir), agents_dir=Path(agents_dir), version_file=Path(version_file))
    report = ValidationReport(title="CloudX iOS Agent API Validation")
    report.action_items = list(ACTION_ITEMS)

    try:
        _check_prerequisites(report, paths, which)
    except AbortValidation as e:
        _log.info("iOS validation aborted: %s", e)
        return report

    _check_sdk_version(report, paths)
    _check_core_classes(report, paths)
    _check_delegates(report, paths)
    _check_factory_methods(report, paths)
    _check_initialization(report, paths)
    _check_privacy_apis(report, paths)
    _check_delegate_callbacks(report, paths)
    _check_show_methods(report, paths)
    _check_view_controller_requirements(report, paths)
    _check_no_deprecated_apis(report, paths)
    return report
