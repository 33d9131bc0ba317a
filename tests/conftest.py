import pytest
from typer.testing import CliRunner

from cloudcall.core.request_dispatcher import RequestDispatcher
from cloudcall.domain.models.request import ServiceDescriptor
from cloudcall.infrastructure.aws.client_resolver import ClientResolver
from cloudcall.infrastructure.aws.service_registry import ServiceRegistry
from cloudcall.infrastructure.config import settings as settings_module
from cloudcall.infrastructure.resilience.api_retry import RetryPolicy
from cloudcall.infrastructure.resilience.request_queue import RequestQueue


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keeps the developer's environment, .env and YAML out of every test."""
    for key in (
        settings_module.PROXY_KEYS + settings_module.CA_KEYS + settings_module.CAFILE_KEYS
        + settings_module.TIMEOUT_KEYS
        + (settings_module.MAX_RETRIES_KEY, settings_module.MAX_CONCURRENT_KEY, settings_module.DEBUG_KEY)
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings_module, "_config", {})
    monkeypatch.setattr(settings_module, "_loaded", True)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    yield
    settings_module.clear_test_config()


@pytest.fixture
def sleeps():
    """Records backoff delays instead of waiting them out."""
    return []


@pytest.fixture
def no_sleep(sleeps):
    async def _sleep(seconds):
        sleeps.append(seconds)
    return _sleep


@pytest.fixture
def events():
    return []


@pytest.fixture
def make_dispatcher(no_sleep, events):
    """Builds a dispatcher over a registry of fake factories."""
    def _make(max_retries=4, max_concurrent=2, **factories):
        registry = ServiceRegistry()
        for name, factory in factories.items():
            registry.register(name.replace("__", "."), factory)
        return RequestDispatcher(
            resolver=ClientResolver(registry),
            retry_policy=RetryPolicy(max_retries=max_retries, sleep=no_sleep, event_listener=events.append),
            request_queue=RequestQueue(max_concurrent=max_concurrent),
        )
    return _make


@pytest.fixture
def descriptor():
    def _descriptor(name="S3", **params):
        params.setdefault("credentials", {})
        return ServiceDescriptor(name=name, params=params)
    return _descriptor
