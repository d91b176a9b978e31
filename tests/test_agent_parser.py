from __future__ import annotations

from pathlib import Path

import pytest

from agentcheck.agent_parser import (
    AgentDocError,
    discover_agents,
    expected_agent_names,
    lint_agents,
    parse_agent,
    parse_agent_text,
)
from agentcheck.report import CheckStatus

from conftest import agent_doc, write


def test_parse_agent_reads_frontmatter_and_body(agents_repo: Path) -> None:
    doc = parse_agent(agents_repo / ".claude/agents/ios/cloudx-ios-integrator.md")
    assert doc.name == "cloudx-ios-integrator"
    assert doc.description == "cloudx-ios-integrator agent"
    assert doc.tools == ("Read", "Write", "Edit", "Grep", "Glob", "Bash")
    assert doc.model == "sonnet"
    assert doc.body.startswith("# CloudX iOS Integrator")


def test_tools_may_be_a_yaml_list() -> None:
    text = "---\nname: a\ndescription: b\ntools:\n  - Read\n  - ' Grep '\n---\nbody\n"
    doc = parse_agent_text(text, Path("a.md"))
    assert doc.tools == ("Read", "Grep")
    assert doc.body == "body\n"


def test_dashed_lines_inside_frontmatter_do_not_close_it() -> None:
    text = "---\nname: a\ndescription: \"one\n----\n---foo two\"\n---\nbody\n"
    doc = parse_agent_text(text, Path("a.md"))
    assert doc.description == "one ---- ---foo two"
    assert doc.body == "body\n"


@pytest.mark.parametrize(
    "text, message",
    [
        ("# no frontmatter\n", "missing YAML frontmatter"),
        ("---\nname: a\ndescription: b\n", "no closing"),
        ("---\n- a\n- b\n---\n", "mapping"),
        ("---\ndescription: b\n---\n", "`name`"),
        ("---\nname: a\n---\n", "`description`"),
        ("---\nname: a\ndescription: b\ntools: 3\n---\n", "`tools`"),
    ],
)
def test_invalid_documents_are_rejected(text: str, message: str) -> None:
    with pytest.raises(AgentDocError, match=message):
        parse_agent_text(text, Path("x.md"))


def test_parse_agent_missing_file(tmp_path: Path) -> None:
    with pytest.raises(AgentDocError, match="does not exist"):
        parse_agent(tmp_path / "nope.md")


def test_expected_agent_names() -> None:
    assert expected_agent_names("ios") == [
        "cloudx-ios-integrator",
        "cloudx-ios-auditor",
        "cloudx-ios-build-verifier",
        "cloudx-ios-privacy-checker",
    ]


def test_discover_agents_sorted(agents_repo: Path) -> None:
    names = [p.name for p in discover_agents(agents_repo / ".claude/agents", "flutter")]
    assert names == sorted(names)
    assert len(names) == 4


def test_lint_agents_clean_roster(agents_repo: Path) -> None:
    report = lint_agents(agents_repo / ".claude/agents", "ios")
    assert report.ok
    # parse + name match for each of the four roles
    assert report.passed_count == 8
    assert report.warning_count == 0


def test_lint_agents_reports_problems(agents_repo: Path) -> None:
    ios = agents_repo / ".claude/agents/ios"
    (ios / "cloudx-ios-auditor.md").unlink()
    write(ios / "cloudx-ios-build-verifier.md", agent_doc("wrong-name"))
    write(ios / "cloudx-ios-privacy-checker.md", agent_doc("cloudx-ios-privacy-checker", tools="Read, Teleport"))
    write(ios / "scratch.md", agent_doc("scratch"))

    report = lint_agents(agents_repo / ".claude/agents", "ios")

    failed = [r.message for r in report.results if r.status is CheckStatus.FAIL]
    warned = [r.message for r in report.results if r.status is CheckStatus.WARN]
    assert "Agent file missing: cloudx-ios-auditor.md" in failed
    assert any("wrong-name" in m for m in failed)
    assert any("Teleport" in m for m in warned)
    assert "Unregistered agent document: scratch.md" in warned
    assert report.exit_code == 1


def test_lint_agents_missing_directory(tmp_path: Path) -> None:
    report = lint_agents(tmp_path, "flutter")
    assert report.aborted
    assert report.failed_count == 1
