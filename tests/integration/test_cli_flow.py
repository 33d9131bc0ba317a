from unittest.mock import MagicMock

import pytest
import typer
from botocore.exceptions import ProfileNotFound
from typer.testing import CliRunner

from cloudcall import main as main_module
from cloudcall.core.command_handler import CommandHandler
from cloudcall.domain.errors import ConfigurationError
from cloudcall.infrastructure.config.settings import RequestSettings
from cloudcall.main import app
from fakes import FailingFactory, FakeFactory, FakeProviderError, Outcomes


@pytest.fixture
def mock_console_display():
    return MagicMock()


@pytest.fixture
def describe():
    return Outcomes({"Stacks": [{"StackName": "app"}], "ResponseMetadata": {}})


@pytest.fixture
def cli_dependencies(mocker, make_dispatcher, mock_console_display, describe):
    """Patches the composition root with fake SDK factories and a mocked display."""
    dispatcher = make_dispatcher(
        CloudFormation=FakeFactory(describe_stacks=describe),
        S3=FakeFactory(get_object=Outcomes(FakeProviderError("Access Denied", code="AccessDenied", status_code=403))),
        Lambda=FailingFactory(ProfileNotFound(profile="typo")),
    )
    handler = CommandHandler(
        dispatcher=dispatcher,
        registry=dispatcher.resolver.registry,
        settings=RequestSettings(timeout_ms=5000),
        ui=mock_console_display,
    )
    dependencies = {"command_handler": handler, "dispatcher": dispatcher, "ui": mock_console_display}
    mocker.patch("cloudcall.main.get_dependencies", return_value=dependencies)
    return dependencies


def test_request_command_flow(runner: CliRunner, cli_dependencies, mock_console_display: MagicMock, describe):
    """Test the full flow for the 'request' command."""
    result = runner.invoke(app, [
        "request", "CloudFormation", "describe_stacks",
        "--params", '{"StackName": "app"}',
        "--region", "eu-west-1",
    ])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    assert describe.calls == 1
    mock_console_display.display_result.assert_called_once_with(
        {"Stacks": [{"StackName": "app"}]}, title="CloudFormation.describe_stacks"
    )
    mock_console_display.display_error.assert_not_called()


def test_request_command_memoized(runner: CliRunner, cli_dependencies, mock_console_display: MagicMock, describe):
    result = runner.invoke(app, ["request", "CloudFormation", "describe_stacks", "--memoize", "--repeat", "5"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    assert describe.calls == 1
    assert mock_console_display.display_result.call_count == 5


def test_request_command_failure_exits_non_zero(runner: CliRunner, cli_dependencies, mock_console_display: MagicMock):
    result = runner.invoke(app, ["request", "S3", "get_object", "--params", '{"Bucket": "b", "Key": "k"}'])

    assert result.exit_code == 1
    mock_console_display.display_error.assert_called_once_with("Access Denied (code: AccessDenied)")


def test_request_command_unknown_profile(runner: CliRunner, cli_dependencies, mock_console_display: MagicMock):
    """Client construction errors are displayed instead of escaping as a traceback."""
    result = runner.invoke(app, ["request", "Lambda", "list_functions", "--profile", "typo"])

    assert result.exit_code == 1
    assert not isinstance(result.exception, ProfileNotFound)
    message = mock_console_display.display_error.call_args.args[0]
    assert message.startswith("Unable to build Lambda client")
    assert "typo" in message
    assert message.endswith("(code: 400)")
    mock_console_display.display_result.assert_not_called()


def test_request_command_invalid_params(runner: CliRunner, cli_dependencies, mock_console_display: MagicMock):
    result = runner.invoke(app, ["request", "CloudFormation", "describe_stacks", "--params", "{oops"])

    assert result.exit_code == 1
    assert "--params is not valid JSON" in mock_console_display.display_error.call_args.args[0]


def test_services_command(runner: CliRunner, cli_dependencies, mock_console_display: MagicMock):
    result = runner.invoke(app, ["services"])

    assert result.exit_code == 0
    mock_console_display.display_table.assert_called_once_with(
        "Registered services", ["Service"], [["CloudFormation"], ["Lambda"], ["S3"]]
    )


def test_settings_command(runner: CliRunner, cli_dependencies, mock_console_display: MagicMock):
    result = runner.invoke(app, ["settings"])

    assert result.exit_code == 0
    rows = mock_console_display.display_table.call_args.args[2]
    assert ["timeout (ms)", 5000] in rows


class TestCompositionRoot:

    @pytest.fixture(autouse=True)
    def fresh_dependencies(self):
        main_module.get_dependencies.cache_clear()
        yield
        main_module.get_dependencies.cache_clear()

    def test_create_dependencies_wires_everything(self, mocker):
        setup_logging = mocker.patch("cloudcall.main.setup_logging")

        dependencies = main_module.create_dependencies()

        setup_logging.assert_called_once()
        assert setup_logging.call_args.kwargs["sdk_debug"] is False
        dispatcher = dependencies["dispatcher"]
        assert dispatcher.retry_policy.max_retries == 4
        assert dispatcher.request_queue.max_concurrent == 2
        assert "DynamoDB.Resource" in dependencies["registry"]
        assert isinstance(dependencies["command_handler"], CommandHandler)

    def test_settings_flow_into_dispatcher(self, mocker, monkeypatch):
        mocker.patch("cloudcall.main.setup_logging")
        monkeypatch.setenv("CLOUDCALL_REQUEST_MAX_RETRIES", "1")
        monkeypatch.setenv("CLOUDCALL_MAX_CONCURRENT_REQUESTS", "5")

        dispatcher = main_module.create_dependencies()["dispatcher"]

        assert dispatcher.retry_policy.max_retries == 1
        assert dispatcher.request_queue.max_concurrent == 5

    def test_initialization_failure_exits(self, mocker):
        mocker.patch("cloudcall.main.create_dependencies", side_effect=ConfigurationError("Unable to read CA file 'x'"))
        display = mocker.patch("cloudcall.main.ConsoleDisplay")

        with pytest.raises(typer.Exit):
            main_module.get_dependencies()

        display.return_value.display_error.assert_called_once_with(
            "Application Initialization Failed: Unable to read CA file 'x'"
        )
