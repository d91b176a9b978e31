"""
agentcheck package

Validation tooling for the CloudX SDK agent documents.

Key responsibilities are split across modules:
- `agent_parser.py`: parse agent markdown (YAML frontmatter) and lint the agent roster
- `sdk_version.py`: documented vs. actual SDK version strings
- `checks.py`: grep-style pattern primitives over files and directory trees
- `report.py`: pass/fail/warn/skip bookkeeping for a validation run
- `renderer.py`: Jinja2 text rendering of reports (and JSON output)
- `ios.py` / `flutter.py`: per-platform API validation suites
- `build_runner.py`: invoke pod/xcodebuild/flutter and record results
- `github_client.py`: isolated GitHub REST API interactions (latest release lookup)
- `config.py`: resolve paths from flags and environment
- `cli.py`: CLI entrypoint and orchestration
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
