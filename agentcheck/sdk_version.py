"""
sdk_version.py

Responsibility: Read SDK version strings from the two places they live.

- Documented: `SDK_VERSION.yaml` at the agents repository root

      platforms:
        ios:
          sdk_version: "1.2.0"
        flutter:
          sdk_version: "0.9.1"

- Actual: the SDK checkout itself (`CLXVersion.m` for iOS, `pubspec.yaml`
  for Flutter).

Anything that cannot be determined is reported as "unknown" so callers can
print both sides of a mismatch.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

UNKNOWN = "unknown"

IOS_VERSION_FILE = Path("core/Sources/CloudXCore/CLXVersion.m")
FLUTTER_PUBSPEC = Path("pubspec.yaml")

_CLX_VERSION_RE = re.compile(r'CLXSDKVersion\s*=\s*@"([^"]*)"')


class VersionError(RuntimeError):
    pass


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    # BaseLoader keeps every scalar as text: an unquoted `1.10` must not become 1.1.
    try:
        data = yaml.load(path.read_text(encoding="utf-8"), Loader=yaml.BaseLoader) or {}
    except yaml.YAMLError as e:
        raise VersionError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise VersionError(f"{path} must contain a mapping at the top level.")
    return data


def load_documented_versions(version_file: str | Path) -> dict[str, str]:
    """
    Return {platform: sdk_version} from SDK_VERSION.yaml.

    Platforms without an `sdk_version` key are omitted.
    """
    path = Path(version_file)
    if not path.is_file():
        raise VersionError(f"SDK version file not found: {path}")
    data = _load_yaml_mapping(path)

    platforms = data.get("platforms") or {}
    if not isinstance(platforms, dict):
        raise VersionError("`platforms` must be an object/mapping in SDK_VERSION.yaml.")

    out: dict[str, str] = {}
    for name, entry in sorted(platforms.items(), key=lambda kv: str(kv[0])):
        version = entry.get("sdk_version") if isinstance(entry, dict) else None
        if isinstance(version, str) and version.strip():
            out[str(name)] = version.strip()
    return out


def documented_version(version_file: str | Path, platform: str) -> str:
    try:
        versions = load_documented_versions(version_file)
    except VersionError:
        return UNKNOWN
    return versions.get(platform, UNKNOWN)


def ios_sdk_version(sdk_dir: str | Path) -> str:
    # e.g. NSString * const CLXSDKVersion = @"1.2.0";
    path = Path(sdk_dir) / IOS_VERSION_FILE
    if not path.is_file():
        return UNKNOWN
    m = _CLX_VERSION_RE.search(path.read_text(encoding="utf-8", errors="replace"))
    return m.group(1) if m else UNKNOWN


def flutter_sdk_version(sdk_dir: str | Path) -> str:
    path = Path(sdk_dir) / FLUTTER_PUBSPEC
    if not path.is_file():
        return UNKNOWN
    try:
        data = _load_yaml_mapping(path)
    except VersionError:
        return UNKNOWN
    version = data.get("version")
    return version.strip() if isinstance(version, str) and version.strip() else UNKNOWN


def sdk_version(platform: str, sdk_dir: str | Path) -> str:
    if platform == "ios":
        return ios_sdk_version(sdk_dir)
    if platform == "flutter":
        return flutter_sdk_version(sdk_dir)
    raise VersionError(f"Unsupported platform: {platform}")
