"""Pytest fixtures for outlook-agent tests."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from outlook_agent.applescript import AutomationRunner
from outlook_agent.attachments import PathGuard


@pytest.fixture
def runner() -> MagicMock:
    """A runner that never touches Outlook; set execute's return value per test."""
    mock = MagicMock(spec=AutomationRunner)
    mock.execute.return_value = ""
    return mock


@pytest.fixture
def attachment_root(tmp_path: Path) -> Path:
    """An allowed attachment directory containing report.txt."""
    root = tmp_path / "work"
    root.mkdir()
    (root / "report.txt").write_text("quarterly numbers")
    return root


@pytest.fixture
def guard(attachment_root: Path) -> PathGuard:
    """PathGuard allowing only attachment_root, resolving relative paths from it."""
    return PathGuard([attachment_root], cwd=str(attachment_root))


@pytest.fixture
def unread_output() -> str:
    """Raw Outlook output for two unread messages."""
    return (
        "{subject:Project Update, sender:alex@example.com, date:Friday 10 January 2025 10:30:00, "
        "id:101, content:Status is green}, "
        "{subject:Lunch?, sender:sam@example.com, date:Friday 10 January 2025 11:00:00, "
        "id:102, content:Noon works}"
    )
