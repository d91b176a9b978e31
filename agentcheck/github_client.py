"""
github_client.py

Responsibility: Look up the latest published release of an SDK repository
and compare its tag with the version recorded in SDK_VERSION.yaml.

Only `GET /repos/{owner}/{repo}/releases/latest` is used. A leading "v" on
the tag is ignored when comparing. Drift and lookup errors are recorded as
warnings and a repository without releases as a skip; none of them fail the
report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from agentcheck.report import ValidationReport

_log = logging.getLogger("agentcheck.github")


class GitHubError(RuntimeError):
    pass


@dataclass(frozen=True)
class ReleaseInfo:
    tag_name: str
    name: str
    html_url: str
    prerelease: bool = False

    @property
    def version(self) -> str:
        tag = self.tag_name.strip()
        return tag[1:] if tag[:1] in ("v", "V") else tag


def split_slug(slug: str) -> tuple[str, str]:
    owner, sep, repo = slug.strip().strip("/").partition("/")
    if not sep or not owner or not repo or "/" in repo:
        raise GitHubError(f"Expected a repository as owner/name, got {slug!r}")
    return owner, repo


class GitHubClient:
    def __init__(self, token: str | None = None, api_base: str = "https://api.github.com", timeout: int = 30) -> None:
        self._token = (token or "").strip() or None
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "agentcheck",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _request(self, method: str, path: str) -> Any:
        url = f"{self._api_base}{path}"
        try:
            r = requests.request(method, url, headers=self._headers(), timeout=self._timeout)
        except requests.RequestException as e:
            raise GitHubError(f"GitHub API request failed {method} {path}: {e}") from e
        if r.status_code >= 400:
            try:
                payload = r.json()
            except ValueError:
                payload = {"message": r.text}
            message = payload.get("message", payload) if isinstance(payload, dict) else payload
            raise GitHubError(f"GitHub API error {r.status_code} {method} {path}: {message}")
        if r.status_code == 204:
            return None
        return r.json()

    def latest_release(self, owner: str, repo: str) -> ReleaseInfo | None:
        """
        Return the latest published (non-draft, non-prerelease) release, or
        None when the repository has no releases or is not visible.
        """
        try:
            data = self._request("GET", f"/repos/{owner}/{repo}/releases/latest")
        except GitHubError as e:
            msg = str(e).lower()
            if " 404 " in msg or "not found" in msg:
                return None
            raise
        return ReleaseInfo(
            tag_name=str(data.get("tag_name") or ""),
            name=str(data.get("name") or ""),
            html_url=str(data.get("html_url") or ""),
            prerelease=bool(data.get("prerelease")),
        )


def check_release(
    report: ValidationReport,
    *,
    platform: str,
    repo_slug: str,
    documented: str,
    client: GitHubClient,
) -> ReleaseInfo | None:
    """Record how the documented version compares with the latest release."""
    report.section(f"Checking Latest {platform} Release")
    try:
        owner, repo = split_slug(repo_slug)
        release = client.latest_release(owner, repo)
    except GitHubError as e:
        _log.warning("Release lookup failed for %s: %s", repo_slug, e)
        report.warned(f"Could not look up latest release of {repo_slug}", str(e))
        return None

    if release is None:
        report.skipped(f"No published releases found for {repo_slug}")
        return None

    report.note(f"Latest release: {release.tag_name} ({release.html_url})")
    if release.version == documented:
        report.passed(f"Documented {platform} version is the latest release ({documented})")
    else:
        report.warned(
            f"Documented {platform} version {documented} differs from latest release {release.version}",
            "Update SDK_VERSION.yaml and re-validate the agents against the new SDK",
        )
    return release
