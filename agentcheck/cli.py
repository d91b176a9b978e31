"""
cli.py

Responsibility: CLI entrypoint for agentcheck.

Commands:
- `validate ios|flutter|all`: check agent docs against the SDK checkouts
- `lint-agents`: check agent frontmatter and the per-platform roster
- `versions`: compare SDK_VERSION.yaml with the SDK checkouts (and releases)
- `build ios|flutter DIR`: run pod/xcodebuild/flutter against a project

Exit codes: 0 all checks passed, 1 a check failed, 2 usage/configuration error.

Commands only wire settings to a suite and pick an output format:
- Checks: `ios.py`, `flutter.py`, `agent_parser.py`, `build_runner.py`
- Output: `renderer.py`
- Release lookup: `github_client.py`
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from agentcheck import __version__
from agentcheck.agent_parser import lint_agents
from agentcheck.build_runner import BuildConfigError, BuildOptions, verify_build
from agentcheck.config import PLATFORMS, Settings, load_settings
from agentcheck.flutter import validate_flutter
from agentcheck.github_client import GitHubClient, GitHubError, check_release
from agentcheck.ios import validate_ios
from agentcheck.renderer import (
    RenderError,
    VersionRow,
    render_json,
    render_text,
    render_versions,
    render_versions_json,
)
from agentcheck.report import ValidationReport
from agentcheck.sdk_version import UNKNOWN, VersionError, load_documented_versions, sdk_version

_log = logging.getLogger("agentcheck.cli")


class CLIError(RuntimeError):
    pass


def _settings(args: argparse.Namespace) -> Settings:
    return load_settings(
        repo_root=args.repo_root,
        ios_sdk_dir=getattr(args, "ios_sdk_dir", None),
        flutter_sdk_dir=getattr(args, "flutter_sdk_dir", None),
        no_color=bool(args.no_color),
    )


def _platforms(choice: str) -> list[str]:
    return list(PLATFORMS) if choice == "all" else [choice]


def _emit(reports: list[ValidationReport], args: argparse.Namespace, settings: Settings) -> int:
    if args.format == "json":
        sys.stdout.write(render_json(reports[0] if len(reports) == 1 else reports))
    else:
        for report in reports:
            sys.stdout.write(render_text(report, color=settings.color))
    return max((r.exit_code for r in reports), default=0)


def _run_suite(platform: str, settings: Settings) -> ValidationReport:
    if platform == "ios":
        return validate_ios(
            sdk_dir=settings.ios_sdk_dir,
            agents_dir=settings.agents_dir,
            version_file=settings.version_file,
        )
    return validate_flutter(
        sdk_dir=settings.flutter_sdk_dir,
        agents_dir=settings.agents_dir,
        version_file=settings.version_file,
    )


def validate_cmd(args: argparse.Namespace) -> int:
    settings = _settings(args)
    _log.debug("settings: %s", settings)
    reports = [_run_suite(p, settings) for p in _platforms(args.platform)]
    return _emit(reports, args, settings)


def lint_cmd(args: argparse.Namespace) -> int:
    settings = _settings(args)
    reports = [lint_agents(settings.agents_dir, p) for p in _platforms(args.platform)]
    return _emit(reports, args, settings)


def _parse_release_specs(specs: Sequence[str]) -> dict[str, str]:
    out: dict[str, str] = {}
    for spec in specs:
        platform, sep, slug = spec.partition("=")
        if not sep or platform not in PLATFORMS or not slug:
            raise CLIError(f"--release expects PLATFORM=owner/repo with PLATFORM in {PLATFORMS}, got {spec!r}")
        out[platform] = slug
    return out


def versions_cmd(args: argparse.Namespace) -> int:
    settings = _settings(args)
    documented = load_documented_versions(settings.version_file)
    releases = _parse_release_specs(args.release or [])

    release_report = ValidationReport(title="CloudX SDK Release Check")
    client = GitHubClient(settings.github_token) if releases else None

    rows: list[VersionRow] = []
    for platform in PLATFORMS:
        doc = documented.get(platform, UNKNOWN)
        sdk = sdk_version(platform, settings.sdk_dir(platform))
        release_tag = None
        if client is not None and platform in releases:
            release = check_release(
                release_report,
                platform=platform,
                repo_slug=releases[platform],
                documented=doc,
                client=client,
            )
            release_tag = release.tag_name if release else None
        rows.append(VersionRow(platform=platform, documented=doc, sdk=sdk, release=release_tag))

    if args.format == "json":
        sys.stdout.write(render_versions_json(rows, release_report if releases else None))
    else:
        sys.stdout.write(render_versions(rows, color=settings.color))
        if release_report.results:
            sys.stdout.write(render_text(release_report, color=settings.color))

    # An SDK checkout that is not present cannot disagree with the docs.
    return 0 if all(row.match or row.sdk == UNKNOWN for row in rows) else 1


def build_cmd(args: argparse.Namespace) -> int:
    settings = _settings(args)
    options = BuildOptions(
        scheme=args.scheme,
        configuration=args.configuration,
        sdk=args.sdk,
        include_ios=bool(args.include_ios),
        timeout=int(args.timeout),
    )
    report = verify_build(args.platform, args.project_dir, options)
    return _emit([report], args, settings)


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--repo-root", default=None, help="Agents repository root (default: $AGENTCHECK_REPO_ROOT or cwd)")
    p.add_argument("--no-color", action="store_true", help="Disable ANSI colors (also honours NO_COLOR)")
    p.add_argument("--format", choices=("text", "json"), default="text", help="Output format (default: text)")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v info, -vv debug)")


def _add_sdk_dirs(p: argparse.ArgumentParser) -> None:
    p.add_argument("--ios-sdk-dir", default=None, help="iOS SDK checkout (default: $IOS_SDK_DIR or ../cloudx-ios-private)")
    p.add_argument(
        "--flutter-sdk-dir",
        default=None,
        help="Flutter SDK checkout (default: $FLUTTER_SDK_DIR or ../cloudx-flutter/cloudx_flutter_sdk)",
    )


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="agentcheck", description="Validate CloudX SDK agent documents and builds")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    v = sub.add_parser("validate", help="Check agent docs against SDK APIs")
    v.add_argument("platform", choices=(*PLATFORMS, "all"))
    _add_common(v)
    _add_sdk_dirs(v)
    v.set_defaults(func=validate_cmd)

    lint = sub.add_parser("lint-agents", help="Check agent frontmatter and roster")
    lint.add_argument("--platform", choices=(*PLATFORMS, "all"), default="all")
    _add_common(lint)
    lint.set_defaults(func=lint_cmd)

    ver = sub.add_parser("versions", help="Compare documented and actual SDK versions")
    ver.add_argument(
        "--release",
        action="append",
        metavar="PLATFORM=OWNER/REPO",
        help="Also compare with the latest GitHub release (uses $GITHUB_TOKEN when set)",
    )
    _add_common(ver)
    _add_sdk_dirs(ver)
    ver.set_defaults(func=versions_cmd)

    b = sub.add_parser("build", help="Run build tools against an integrated app project")
    b.add_argument("platform", choices=PLATFORMS)
    b.add_argument("project_dir", help="App project directory")
    b.add_argument("--scheme", default=None, help="Xcode scheme (default: workspace/project name)")
    b.add_argument("--configuration", default="Debug", help="Xcode configuration (default: Debug)")
    b.add_argument("--sdk", default="iphonesimulator", help="Xcode SDK (default: iphonesimulator)")
    b.add_argument("--include-ios", action="store_true", help="Flutter: also run `flutter build ios --no-codesign`")
    b.add_argument("--timeout", type=int, default=1800, help="Per-step timeout in seconds (default: 1800)")
    _add_common(b)
    b.set_defaults(func=build_cmd)

    return p


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(int(args.verbose))
    try:
        return int(args.func(args))
    except (CLIError, VersionError, BuildConfigError, GitHubError, RenderError) as e:
        _log.debug("command failed", exc_info=True)
        print(f"agentcheck: error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
