import datetime
import json
from unittest.mock import MagicMock

import pytest
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table

from cloudcall.infrastructure.cli.display import ConsoleDisplay


@pytest.fixture
def mock_console():
    """Fixture to create a mock rich Console object."""
    return MagicMock()


@pytest.fixture
def console_display(mock_console: MagicMock):
    """Fixture to create a ConsoleDisplay instance with a mocked console."""
    display = ConsoleDisplay()
    display._console = mock_console  # Inject the mock
    return display


def printed(mock_console: MagicMock):
    mock_console.print.assert_called_once()
    args, _ = mock_console.print.call_args
    assert len(args) == 1
    return args[0]


def test_display_result(console_display: ConsoleDisplay, mock_console: MagicMock):
    """Test that display_result prints the response as JSON in a titled panel."""
    created = datetime.datetime(2024, 1, 2, 3, 4, 5)
    console_display.display_result({"Stacks": [{"StackName": "app", "CreationTime": created}]}, title="CloudFormation.describe_stacks")

    panel = printed(mock_console)
    assert isinstance(panel, Panel)
    assert "CloudFormation.describe_stacks" in panel.title
    assert isinstance(panel.renderable, JSON)
    assert "2024-01-02 03:04:05" in panel.renderable.text.plain


def test_display_result_default_title(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_result([])
    assert "Result" in printed(mock_console).title


def test_display_error(console_display: ConsoleDisplay, mock_console: MagicMock):
    """Test that display_error prints the message in a red panel."""
    error_msg = "Something went wrong"
    console_display.display_error(error_msg)
    panel = printed(mock_console)
    assert panel.border_style == "red"
    assert panel.renderable.plain == error_msg


def test_display_info(console_display: ConsoleDisplay, mock_console: MagicMock):
    """Test that display_info prints the message in a blue panel."""
    info_msg = "Process completed"
    console_display.display_info(info_msg)
    panel = printed(mock_console)
    assert panel.border_style == "blue"
    assert panel.renderable.plain == info_msg


def test_display_warning(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_warning("Careful")
    panel = printed(mock_console)
    assert panel.border_style == "yellow"
    assert panel.renderable.plain == "Careful"


def test_display_table(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_table("Registered services", ["Service", "Kind"], [["S3", "client"], ["SQS", 1]])
    table = printed(mock_console)
    assert isinstance(table, Table)
    assert table.title == "Registered services"
    assert [column.header for column in table.columns] == ["Service", "Kind"]
    assert table.row_count == 2
    assert list(table.columns[1].cells) == ["client", "1"]


def test_result_json_is_valid(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_result({"b": 1, "a": None})
    json.loads(printed(mock_console).renderable.text.plain)
