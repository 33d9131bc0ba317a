"""Resolves service descriptors to (cached) SDK clients.

Client construction is expensive, so one client is built per canonical
descriptor and method and shared by every equivalent call. Only the
credentials, the region and, for S3, the acceleration flag reach the
factory; any other descriptor params are metadata for the dispatcher.
"""

import logging
import threading
from collections.abc import Mapping
from typing import Any, Dict

from botocore.exceptions import BotoCoreError

from cloudcall.domain.errors import ConfigurationError
from cloudcall.domain.models.common import CacheKey, ClientConstructionParams, MethodName
from cloudcall.domain.models.request import ServiceDescriptor
from cloudcall.infrastructure.aws.service_registry import ServiceRegistry
from cloudcall.infrastructure.cache.canonical import canonical_descriptor, make_cache_key

logger = logging.getLogger(__name__)

STORAGE_SERVICE = "S3"
ACCELERATED_METHODS = frozenset({"put_object", "upload_file", "upload_fileobj"})
ACCELERATION_FLAG = "is_s3_transfer_acceleration_enabled"


def validate_descriptor(descriptor: Any) -> None:
    """Raises ConfigurationError unless ``descriptor`` can reach a provider."""
    if not isinstance(descriptor, ServiceDescriptor) or not descriptor.name:
        raise ConfigurationError("Inappropriate call of invoke(), missing service name")
    if not isinstance(descriptor.params, Mapping) or not isinstance(descriptor.params.get("credentials"), Mapping):
        raise ConfigurationError("Inappropriate call of invoke(), missing credentials in service params")


def wants_acceleration(descriptor: ServiceDescriptor, method: str) -> bool:
    return (
        descriptor.name == STORAGE_SERVICE
        and method in ACCELERATED_METHODS
        and bool(descriptor.params.get(ACCELERATION_FLAG))
    )


def construction_params(descriptor: ServiceDescriptor, method: str) -> ClientConstructionParams:
    """Exactly what gets passed to the factory for ``descriptor``."""
    params = ClientConstructionParams(
        credentials=dict(descriptor.credentials),
        region=descriptor.region,
    )
    if descriptor.name == STORAGE_SERVICE:
        params["use_accelerate_endpoint"] = wants_acceleration(descriptor, method)
    return params


class ClientResolver:
    """Builds clients through the registry and caches them."""

    def __init__(self, registry: ServiceRegistry):
        self.registry = registry
        self._clients: Dict[CacheKey, Any] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._clients)

    @staticmethod
    def cache_key(descriptor: ServiceDescriptor, method: MethodName) -> CacheKey:
        return make_cache_key(canonical_descriptor(descriptor), method)

    def resolve(self, descriptor: ServiceDescriptor, method: MethodName) -> Any:
        """Returns the client for ``descriptor``, constructing it on first use.

        Raises:
            ConfigurationError: If the descriptor is malformed, names an
                unregistered service, or the SDK refuses to build the
                client (e.g. an unknown profile).
        """
        validate_descriptor(descriptor)
        key = self.cache_key(descriptor, method)
        with self._lock:
            client = self._clients.get(key)
            if client is not None:
                return client
            factory = self.registry.get(descriptor.name)
            params = construction_params(descriptor, method)
            try:
                client = factory(**params)
            except BotoCoreError as e:
                raise ConfigurationError(f"Unable to build {descriptor.name} client: {e}") from e
            self._clients[key] = client
        logger.debug(f"Constructed {descriptor.name} client for region {params['region']}")
        return client
