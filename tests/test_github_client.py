from __future__ import annotations

from typing import Any

import pytest
import requests

from agentcheck import github_client
from agentcheck.github_client import GitHubClient, GitHubError, ReleaseInfo, check_release, split_slug
from agentcheck.report import CheckStatus, ValidationReport


class FakeResponse:
    def __init__(self, status_code: int, payload: Any) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = str(payload)

    def json(self) -> Any:
        return self._payload


class FakeAPI:
    def __init__(self) -> None:
        self.responses: list[FakeResponse | Exception] = []
        self.calls: list[dict[str, Any]] = []

    def __call__(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture()
def api(monkeypatch: pytest.MonkeyPatch) -> FakeAPI:
    fake = FakeAPI()
    monkeypatch.setattr(github_client.requests, "request", fake)
    return fake


RELEASE = {"tag_name": "v1.2.0", "name": "1.2.0", "html_url": "https://github.com/o/r/releases/tag/v1.2.0"}


def test_latest_release(api: FakeAPI) -> None:
    api.responses.append(FakeResponse(200, RELEASE))
    release = GitHubClient("tok").latest_release("o", "r")
    assert release == ReleaseInfo(tag_name="v1.2.0", name="1.2.0", html_url=RELEASE["html_url"])
    assert release.version == "1.2.0"
    assert api.calls[0]["url"] == "https://api.github.com/repos/o/r/releases/latest"
    assert api.calls[0]["headers"]["Authorization"] == "Bearer tok"


def test_anonymous_client_sends_no_authorization(api: FakeAPI) -> None:
    api.responses.append(FakeResponse(200, RELEASE))
    GitHubClient().latest_release("o", "r")
    assert "Authorization" not in api.calls[0]["headers"]


def test_latest_release_not_found(api: FakeAPI) -> None:
    api.responses.append(FakeResponse(404, {"message": "Not Found"}))
    assert GitHubClient().latest_release("o", "r") is None


def test_api_errors_raise(api: FakeAPI) -> None:
    api.responses.append(FakeResponse(403, {"message": "API rate limit exceeded"}))
    with pytest.raises(GitHubError, match="rate limit"):
        GitHubClient().latest_release("o", "r")


def test_split_slug() -> None:
    assert split_slug("cloudx-io/cloudx-ios") == ("cloudx-io", "cloudx-ios")
    with pytest.raises(GitHubError):
        split_slug("just-a-name")


def test_check_release_matches(api: FakeAPI) -> None:
    api.responses.append(FakeResponse(200, RELEASE))
    report = ValidationReport(title="t")
    check_release(report, platform="ios", repo_slug="o/r", documented="1.2.0", client=GitHubClient())
    assert [r.status for r in report.results] == [CheckStatus.PASS]


def test_check_release_drift_is_a_warning(api: FakeAPI) -> None:
    api.responses.append(FakeResponse(200, {**RELEASE, "tag_name": "v1.3.0"}))
    report = ValidationReport(title="t")
    release = check_release(report, platform="ios", repo_slug="o/r", documented="1.2.0", client=GitHubClient())
    assert release is not None and release.version == "1.3.0"
    assert report.ok
    assert report.warning_count == 1


def test_check_release_network_error_is_a_warning(api: FakeAPI) -> None:
    api.responses.append(requests.ConnectionError("offline"))
    report = ValidationReport(title="t")
    assert check_release(report, platform="ios", repo_slug="o/r", documented="1.2.0", client=GitHubClient()) is None
    assert report.ok
    assert report.warning_count == 1


def test_check_release_without_releases_is_skipped(api: FakeAPI) -> None:
    api.responses.append(FakeResponse(404, {"message": "Not Found"}))
    report = ValidationReport(title="t")
    check_release(report, platform="flutter", repo_slug="o/r", documented="0.9.1", client=GitHubClient())
    assert report.skipped_count == 1
