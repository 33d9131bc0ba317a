"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), builds descriptors
from the command options and delegates to the RequestDispatcher.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from cloudcall.core.request_dispatcher import RequestDispatcher
from cloudcall.domain.errors import CloudCallError, ConfigurationError
from cloudcall.domain.interfaces.user_interface import UserInterface
from cloudcall.domain.models.request import ServiceDescriptor
from cloudcall.infrastructure.aws.service_registry import ServiceRegistry
from cloudcall.infrastructure.config.settings import RequestSettings

logger = logging.getLogger(__name__)


def parse_params(params_json: Optional[str]) -> Dict[str, Any]:
    """Parses the ``--params`` option into a keyword mapping."""
    if not params_json:
        return {}
    try:
        params = json.loads(params_json)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"--params is not valid JSON: {e}") from e
    if not isinstance(params, dict):
        raise ConfigurationError("--params must be a JSON object")
    return params


class CommandHandler:
    """Handles incoming commands and delegates to the dispatcher."""

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        registry: ServiceRegistry,
        settings: RequestSettings,
        ui: UserInterface,
    ):
        self.dispatcher = dispatcher
        self.registry = registry
        self.settings = settings
        self.ui = ui

    async def handle_request(
        self,
        service: str,
        method: str,
        params_json: Optional[str] = None,
        region: Optional[str] = None,
        profile: Optional[str] = None,
        accelerate: bool = False,
        memoize: bool = False,
        repeat: int = 1,
    ) -> bool:
        """Handles the 'request' command. Returns False on failure."""
        logger.info(f"Handling 'request' command: {service}.{method} (region={region or 'default'})")
        try:
            params = parse_params(params_json)
            credentials = {"profile_name": profile} if profile else {}
            flags = {"is_s3_transfer_acceleration_enabled": True} if accelerate else {}
            descriptor = ServiceDescriptor.create(service, credentials=credentials, region=region, **flags)
            send = self.dispatcher.invoke_memoized if memoize else self.dispatcher.invoke
            futures = [send(descriptor, method, params) for _ in range(max(1, repeat))]
            results = await asyncio.gather(*futures)
        except CloudCallError as e:
            logger.error(f"Request {service}.{method} failed: {e.message}")
            self.ui.display_error(f"{e.message} (code: {e.code})" if e.code is not None else e.message)
            return False

        for index, result in enumerate(results, start=1):
            title = f"{service}.{method}" if len(results) == 1 else f"{service}.{method} #{index}"
            self.ui.display_result(_strip_metadata(result), title=title)
        if memoize and len(results) > 1:
            self.ui.display_info(f"{len(results)} calls shared {len(self.dispatcher.call_cache)} underlying request(s).")
        return True

    def handle_list_services(self) -> None:
        """Handles the 'services' command."""
        rows = [[name] for name in self.registry.names()]
        self.ui.display_table("Registered services", ["Service"], rows)

    def handle_show_settings(self) -> None:
        """Handles the 'settings' command. Certificate contents are never printed."""
        s = self.settings
        self.ui.display_table(
            "Request settings",
            ["Setting", "Value"],
            [
                ["proxy", s.proxy or "-"],
                ["ca certificates", len(s.ca_certs)],
                ["ca files", ", ".join(s.ca_files) or "-"],
                ["timeout (ms)", s.timeout_ms],
                ["max retries", s.max_retries],
                ["max concurrent requests", s.max_concurrent_requests],
                ["sdk debug", s.sdk_debug],
            ],
        )


def _strip_metadata(result: Any) -> Any:
    if isinstance(result, dict):
        return {k: v for k, v in result.items() if k != "ResponseMetadata"}
    return result
