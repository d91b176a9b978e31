"""
agent_parser.py

Responsibility: Load agent markdown documents into a typed model and lint
the per-platform agent roster.

An agent document starts with YAML frontmatter delimited by '---' lines:

    ---
    name: cloudx-ios-integrator
    description: Integrates the CloudX SDK ...
    tools: Read, Write, Edit, Grep, Glob, Bash
    model: sonnet
    ---

The body that follows is free-form prose for the assistant runtime and is
kept verbatim.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from agentcheck.report import ValidationReport

_log = logging.getLogger("agentcheck.agents")

_CLOSING_DELIMITER = re.compile(r"^---[ \t]*$", re.MULTILINE)

ROLES = ("integrator", "auditor", "build-verifier", "privacy-checker")

KNOWN_TOOLS = frozenset(
    {
        "Read",
        "Write",
        "Edit",
        "MultiEdit",
        "Grep",
        "Glob",
        "Bash",
        "WebFetch",
        "WebSearch",
        "TodoWrite",
        "NotebookEdit",
        "Task",
    }
)


class AgentDocError(ValueError):
    pass


@dataclass(frozen=True)
class AgentDoc:
    """Parsed agent document."""

    name: str
    description: str
    path: Path
    tools: tuple[str, ...] = ()
    model: str | None = None
    color: str | None = None
    body: str = ""


def _split_frontmatter(text: str) -> tuple[dict[str, Any] | None, str]:
    """
    If the markdown begins with YAML frontmatter delimited by '---', parse it.
    Returns (frontmatter_dict_or_none, remaining_markdown_text).
    """
    text = text.replace("\r\n", "\n")
    if not text.startswith("---\n"):
        return None, text

    closing = _CLOSING_DELIMITER.search(text, 4)
    if closing is None:
        raise AgentDocError("YAML frontmatter starts with '---' but no closing '---' was found.")

    fm_text = text[4 : closing.start()]
    rest = text[closing.end() :].lstrip("\n")
    try:
        data = yaml.safe_load(fm_text) or {}
    except yaml.YAMLError as e:
        raise AgentDocError(f"Invalid YAML frontmatter: {e}") from e
    if not isinstance(data, dict):
        raise AgentDocError("YAML frontmatter must be a mapping/object at the top level.")
    return data, rest


def _normalize_tools(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        items = raw.split(",")
    elif isinstance(raw, (list, tuple)):
        items = [str(x) for x in raw]
    else:
        raise AgentDocError("`tools` must be a comma-separated string or a list.")
    return tuple(t.strip() for t in items if t.strip())


def parse_agent_text(text: str, path: Path) -> AgentDoc:
    frontmatter, body = _split_frontmatter(text)
    if frontmatter is None:
        raise AgentDocError(f"{path.name}: missing YAML frontmatter.")

    name = str(frontmatter.get("name") or "").strip()
    if not name:
        raise AgentDocError(f"{path.name}: frontmatter must define `name`.")
    description = str(frontmatter.get("description") or "").strip()
    if not description:
        raise AgentDocError(f"{path.name}: frontmatter must define `description`.")

    model = frontmatter.get("model")
    color = frontmatter.get("color")
    return AgentDoc(
        name=name,
        description=description,
        path=path,
        tools=_normalize_tools(frontmatter.get("tools")),
        model=str(model).strip() if model is not None else None,
        color=str(color).strip() if color is not None else None,
        body=body,
    )


def parse_agent(agent_path: str | Path) -> AgentDoc:
    """Parse a single agent markdown file into an `AgentDoc`."""
    path = Path(agent_path)
    if not path.is_file():
        raise AgentDocError(f"Agent file does not exist: {path}")
    return parse_agent_text(path.read_text(encoding="utf-8"), path)


def expected_agent_names(platform: str) -> list[str]:
    return [f"cloudx-{platform}-{role}" for role in ROLES]


def platform_agent_dir(agents_dir: str | Path, platform: str) -> Path:
    return Path(agents_dir) / platform


def discover_agents(agents_dir: str | Path, platform: str) -> list[Path]:
    d = platform_agent_dir(agents_dir, platform)
    if not d.is_dir():
        return []
    return sorted(d.glob("*.md"), key=lambda p: p.name)


def lint_agents(agents_dir: str | Path, platform: str) -> ValidationReport:
    """
    Check the agent roster of one platform:
    - every required role has a document that parses
    - frontmatter `name` matches the file name
    - tool names are ones the assistant runtime knows (warning only)
    """
    report = ValidationReport(title=f"CloudX {platform} Agent Lint")
    d = platform_agent_dir(agents_dir, platform)
    report.section(f"Agents in {d}")
    if not d.is_dir():
        report.failed("Agent directory not found", f"Expected: {d}")
        report.aborted = True
        return report

    required = expected_agent_names(platform)
    for stem in required:
        path = d / f"{stem}.md"
        if not path.is_file():
            report.failed(f"Agent file missing: {stem}.md", f"Expected at {path}")
            continue
        try:
            doc = parse_agent(path)
        except AgentDocError as e:
            report.failed(f"Agent file does not parse: {stem}.md", str(e))
            continue
        report.passed(f"Agent file parses: {stem}.md")
        report.expect(
            doc.name == stem,
            f"Frontmatter name matches file: {stem}",
            f"Frontmatter name {doc.name!r} does not match file {stem}.md",
            "Rename the file or fix the `name` field",
        )
        unknown = sorted(t for t in doc.tools if t not in KNOWN_TOOLS)
        if unknown:
            report.warned(f"{stem}.md lists unknown tools: {', '.join(unknown)}", f"Known tools: {', '.join(sorted(KNOWN_TOOLS))}")
        if not doc.tools:
            _log.debug("%s declares no tools (inherits runtime defaults)", stem)

    extra = [p.stem for p in discover_agents(agents_dir, platform) if p.stem not in required]
    for stem in extra:
        report.warned(f"Unregistered agent document: {stem}.md", "Only the four platform roles are expected")

    report.action_items = [
        "Fix the frontmatter of the failing agent documents",
        f"Keep one document per role: {', '.join(ROLES)}",
        "Re-run `agentcheck lint-agents`",
    ]
    return report
