"""Registry mapping service identifiers to client factories.

Callers address services by identifiers such as ``CloudFormation`` or
``DynamoDB.Resource``. Each identifier maps to a closure building a boto3
client or resource, so nothing walks the SDK module at request time. The
registry is validated against the installed botocore data at startup.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

import boto3
from botocore.config import Config

from cloudcall.domain.errors import ConfigurationError
from cloudcall.domain.interfaces.service_factory import ServiceFactory
from cloudcall.domain.models.common import Credentials, Region, ServiceName
from cloudcall.infrastructure.aws.transport import TransportOptions

logger = logging.getLogger(__name__)

SESSION_CREDENTIAL_KEYS = ("aws_access_key_id", "aws_secret_access_key", "aws_session_token", "profile_name")

# identifier -> (botocore service name, kind)
DEFAULT_SERVICES: Dict[str, tuple] = {
    "S3": ("s3", "client"),
    "CloudFormation": ("cloudformation", "client"),
    "Lambda": ("lambda", "client"),
    "IAM": ("iam", "client"),
    "STS": ("sts", "client"),
    "CloudWatchLogs": ("logs", "client"),
    "CloudWatch": ("cloudwatch", "client"),
    "APIGateway": ("apigateway", "client"),
    "ApiGatewayV2": ("apigatewayv2", "client"),
    "EventBridge": ("events", "client"),
    "DynamoDB": ("dynamodb", "client"),
    "SQS": ("sqs", "client"),
    "SNS": ("sns", "client"),
    "ECR": ("ecr", "client"),
    "Kinesis": ("kinesis", "client"),
    "SSM": ("ssm", "client"),
    "Cognito": ("cognito-idp", "client"),
    "S3.Resource": ("s3", "resource"),
    "DynamoDB.Resource": ("dynamodb", "resource"),
}


def make_session(credentials: Mapping[str, Any]) -> boto3.session.Session:
    """Creates a boto3 Session from a credential mapping; unknown keys are ignored."""
    kwargs = {k: credentials[k] for k in SESSION_CREDENTIAL_KEYS if credentials.get(k)}
    return boto3.session.Session(**kwargs)


def _build_factory(
    service_name: str,
    kind: str,
    transport: TransportOptions,
    session_factory: Callable[[Mapping[str, Any]], Any],
) -> ServiceFactory:
    def factory(
        credentials: Credentials,
        region: Region,
        use_accelerate_endpoint: Optional[bool] = None,
    ) -> Any:
        session = session_factory(credentials)
        config: Config = transport.for_accelerated_s3() if use_accelerate_endpoint else transport.config
        build = session.client if kind == "client" else session.resource
        return build(service_name, region_name=region, config=config, verify=transport.verify)

    factory.service_name = service_name
    factory.kind = kind
    return factory


def client_factory(
    service_name: str,
    transport: TransportOptions,
    session_factory: Callable[[Mapping[str, Any]], Any] = make_session,
) -> ServiceFactory:
    return _build_factory(service_name, "client", transport, session_factory)


def resource_factory(
    service_name: str,
    transport: TransportOptions,
    session_factory: Callable[[Mapping[str, Any]], Any] = make_session,
) -> ServiceFactory:
    return _build_factory(service_name, "resource", transport, session_factory)


class ServiceRegistry:
    """Explicit identifier -> factory map."""

    def __init__(self):
        self._factories: Dict[ServiceName, ServiceFactory] = {}

    def register(self, name: str, factory: ServiceFactory) -> None:
        if not name:
            raise ConfigurationError("Service identifier must not be empty")
        if name in self._factories:
            logger.debug(f"Replacing factory for service '{name}'")
        self._factories[ServiceName(name)] = factory

    def get(self, name: str) -> ServiceFactory:
        try:
            return self._factories[ServiceName(name)]
        except KeyError:
            raise ConfigurationError(f"Unknown service '{name}'. Registered: {', '.join(self.names())}") from None

    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def validate(self, session: Optional[boto3.session.Session] = None) -> None:
        """Checks every SDK-backed factory against the installed botocore data.

        Raises:
            ConfigurationError: If a registered service is unknown to botocore.
        """
        session = session or boto3.session.Session()
        clients = set(session.get_available_services())
        resources = set(session.get_available_resources())
        missing = []
        for name, factory in self._factories.items():
            service_name = getattr(factory, "service_name", None)
            if service_name is None:
                continue  # custom factory
            available = resources if getattr(factory, "kind", "client") == "resource" else clients
            if service_name not in available:
                missing.append(f"{name} ({service_name})")
        if missing:
            raise ConfigurationError(f"Services not available in the installed SDK: {', '.join(missing)}")
        logger.debug(f"Service registry validated: {len(self._factories)} services")


def default_registry(transport: TransportOptions) -> ServiceRegistry:
    """Registry with the services the deployment plugins talk to."""
    registry = ServiceRegistry()
    for name, (service_name, kind) in DEFAULT_SERVICES.items():
        build = resource_factory if kind == "resource" else client_factory
        registry.register(name, build(service_name, transport))
    return registry
