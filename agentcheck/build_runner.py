"""
build_runner.py

Responsibility: Run the third-party build tools an integration is verified
with and record each step as a check.

iOS:      pod install -> xcodebuild build (simulator, Debug)
Flutter:  flutter pub get -> flutter analyze -> flutter build apk [-> flutter build ios]

Steps run sequentially; the first failing step fails the report and the
remaining steps are recorded as skipped. This module does not parse build
output beyond keeping a tail of it for the report hint.
"""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from agentcheck.report import ValidationReport

_log = logging.getLogger("agentcheck.build")

DEFAULT_TIMEOUT = 1800
OUTPUT_TAIL_LINES = 20


class BuildConfigError(ValueError):
    pass


@dataclass(frozen=True)
class CommandResult:
    cmd: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def tail(self, lines: int = OUTPUT_TAIL_LINES) -> str:
        combined = "\n".join(x for x in (self.stdout.rstrip(), self.stderr.rstrip()) if x)
        return "\n".join(combined.splitlines()[-lines:])


@dataclass(frozen=True)
class BuildStep:
    label: str
    cmd: tuple[str, ...]


@dataclass(frozen=True)
class BuildOptions:
    scheme: str | None = None
    configuration: str = "Debug"
    sdk: str = "iphonesimulator"
    include_ios: bool = False
    timeout: int = DEFAULT_TIMEOUT


Runner = Callable[..., CommandResult]


def _decode(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    return value


def run_command(
    cmd: list[str] | tuple[str, ...],
    *,
    cwd: Path,
    timeout: int = DEFAULT_TIMEOUT,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """
    Run a subprocess and capture its output.

    Tool failures are reported through the return code, never raised:
    127 when the executable is missing, 126 when it cannot be executed,
    124 on timeout.
    """
    started = time.monotonic()
    _log.info("Running %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        p = subprocess.run(
            list(cmd),
            cwd=str(cwd),
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            timeout=timeout,
            check=False,
        )
        result = CommandResult(tuple(cmd), p.returncode, p.stdout, p.stderr, time.monotonic() - started)
    except subprocess.TimeoutExpired as e:
        result = CommandResult(
            tuple(cmd), 124, _decode(e.stdout), _decode(e.stderr) + "\n[timeout]", time.monotonic() - started
        )
    except FileNotFoundError as e:
        result = CommandResult(tuple(cmd), 127, "", f"{e}\n[missing tool]", time.monotonic() - started)
    except OSError as e:
        result = CommandResult(tuple(cmd), 126, "", f"{e}\n[cannot execute]", time.monotonic() - started)
    _log.debug("%s exited %d after %.1fs", cmd[0], result.returncode, result.duration)
    return result


def _find_xcode_container(project_dir: Path) -> tuple[str, Path]:
    workspaces = sorted(p for p in project_dir.glob("*.xcworkspace") if p.is_dir())
    if workspaces:
        return "-workspace", workspaces[0]
    projects = sorted(p for p in project_dir.glob("*.xcodeproj") if p.is_dir())
    if projects:
        return "-project", projects[0]
    raise BuildConfigError(f"No .xcworkspace or .xcodeproj found in {project_dir}")


def ios_steps(project_dir: Path, options: BuildOptions) -> list[BuildStep]:
    steps: list[BuildStep] = []
    if (project_dir / "Podfile").is_file():
        steps.append(BuildStep("pod install", ("pod", "install")))

    # After `pod install` the workspace exists even if it did not before.
    if steps and not any(project_dir.glob("*.xcworkspace")):
        projects = sorted(project_dir.glob("*.xcodeproj"))
        if not projects:
            raise BuildConfigError(f"No .xcodeproj found in {project_dir}")
        flag, container = "-workspace", project_dir / f"{projects[0].stem}.xcworkspace"
    else:
        flag, container = _find_xcode_container(project_dir)

    scheme = options.scheme or container.stem
    steps.append(
        BuildStep(
            "xcodebuild",
            (
                "xcodebuild",
                flag,
                container.name,
                "-scheme",
                scheme,
                "-configuration",
                options.configuration,
                "-sdk",
                options.sdk,
                "build",
            ),
        )
    )
    return steps


def flutter_steps(project_dir: Path, options: BuildOptions) -> list[BuildStep]:
    if not (project_dir / "pubspec.yaml").is_file():
        raise BuildConfigError(f"pubspec.yaml not found in {project_dir}")
    steps = [
        BuildStep("flutter pub get", ("flutter", "pub", "get")),
        BuildStep("flutter analyze", ("flutter", "analyze")),
        BuildStep("flutter build apk", ("flutter", "build", "apk", "--debug")),
    ]
    if options.include_ios:
        steps.append(BuildStep("flutter build ios", ("flutter", "build", "ios", "--no-codesign", "--debug")))
    return steps


def build_steps(platform: str, project_dir: str | Path, options: BuildOptions | None = None) -> list[BuildStep]:
    options = options or BuildOptions()
    d = Path(project_dir)
    if not d.is_dir():
        raise BuildConfigError(f"Project directory not found: {d}")
    if platform == "ios":
        return ios_steps(d, options)
    if platform == "flutter":
        return flutter_steps(d, options)
    raise BuildConfigError(f"Unsupported platform: {platform}")


def verify_build(
    platform: str,
    project_dir: str | Path,
    options: BuildOptions | None = None,
    *,
    runner: Runner | None = None,
) -> ValidationReport:
    options = options or BuildOptions()
    runner = runner or run_command
    d = Path(project_dir).resolve()
    steps = build_steps(platform, d, options)

    report = ValidationReport(title=f"CloudX {platform} Build Verification")
    report.action_items = [
        "Read the output tail of the failed step above",
        "Fix dependency or compile errors in the project",
        "Re-run the build verification",
    ]
    report.section(f"Building {d}")

    failed = False
    for step in steps:
        if failed:
            report.skipped(f"{step.label} (not run: an earlier step failed)")
            continue
        result = runner(step.cmd, cwd=d, timeout=options.timeout)
        if result.ok:
            report.passed(f"{step.label} succeeded ({result.duration:.1f}s)")
            continue
        failed = True
        if result.returncode == 127:
            report.failed(f"{step.label}: {step.cmd[0]} not found", f"Install {step.cmd[0]} or add it to PATH")
        elif result.returncode == 124:
            report.failed(f"{step.label} timed out after {options.timeout}s", result.tail() or None)
        else:
            report.failed(f"{step.label} failed with exit code {result.returncode}", result.tail() or None)
    return report
