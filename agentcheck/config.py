"""
config.py

Responsibility: Resolve the paths a run works against.

Precedence: explicit CLI value > environment variable > default. Defaults
assume the SDK checkouts sit next to the agents repository:

    <parent>/cloudx-sdk-agents                      (repo root)
    <parent>/cloudx-ios-private                     (IOS_SDK_DIR)
    <parent>/cloudx-flutter/cloudx_flutter_sdk      (FLUTTER_SDK_DIR)
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

PLATFORMS = ("ios", "flutter")


@dataclass(frozen=True)
class Settings:
    repo_root: Path
    ios_sdk_dir: Path
    flutter_sdk_dir: Path
    color: bool = True
    github_token: str | None = None

    @property
    def version_file(self) -> Path:
        return self.repo_root / "SDK_VERSION.yaml"

    @property
    def agents_dir(self) -> Path:
        return self.repo_root / ".claude" / "agents"

    def sdk_dir(self, platform: str) -> Path:
        return self.ios_sdk_dir if platform == "ios" else self.flutter_sdk_dir


def _color_enabled(env: Mapping[str, str], no_color: bool, stream: object) -> bool:
    if no_color or env.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def load_settings(
    *,
    repo_root: str | Path | None = None,
    ios_sdk_dir: str | Path | None = None,
    flutter_sdk_dir: str | Path | None = None,
    no_color: bool = False,
    env: Mapping[str, str] | None = None,
    stream: object | None = None,
) -> Settings:
    env = os.environ if env is None else env
    stream = sys.stdout if stream is None else stream

    root = Path(repo_root or env.get("AGENTCHECK_REPO_ROOT") or Path.cwd()).resolve()
    ios = Path(ios_sdk_dir or env.get("IOS_SDK_DIR") or root.parent / "cloudx-ios-private")
    flutter = Path(flutter_sdk_dir or env.get("FLUTTER_SDK_DIR") or root.parent / "cloudx-flutter" / "cloudx_flutter_sdk")

    return Settings(
        repo_root=root,
        ios_sdk_dir=ios.resolve(),
        flutter_sdk_dir=flutter.resolve(),
        color=_color_enabled(env, no_color, stream),
        github_token=env.get("GITHUB_TOKEN") or None,
    )
