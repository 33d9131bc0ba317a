"""HTTP transport options shared by every constructed client.

Maps proxy, CA certificate and timeout settings onto a botocore ``Config``
and a ``verify`` bundle path. SDK-level retries are switched off because
the request layer's own policy owns retrying.
"""

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from botocore.config import Config

from cloudcall.domain.errors import ConfigurationError
from cloudcall.infrastructure.config.settings import RequestSettings

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_SECONDS = 60


@dataclass(frozen=True)
class TransportOptions:
    config: Config
    verify: Optional[str] = None

    def for_accelerated_s3(self) -> Config:
        return self.config.merge(Config(s3={"use_accelerate_endpoint": True}))


def _collect_ca_bundle(settings: RequestSettings) -> List[str]:
    certs = list(settings.ca_certs)
    for path in settings.ca_files:
        try:
            certs.append(Path(path).read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigurationError(f"Unable to read CA file '{path}': {e}") from e
    return certs


def _write_ca_bundle(certs: List[str]) -> str:
    bundle = tempfile.NamedTemporaryFile(
        mode="w", prefix="cloudcall-ca-", suffix=".pem", delete=False, encoding="utf-8"
    )
    with bundle:
        for cert in certs:
            bundle.write(cert.strip() + "\n")
    logger.debug(f"Wrote CA bundle with {len(certs)} certificate(s) to {bundle.name}")
    return bundle.name


def build_transport(settings: RequestSettings) -> TransportOptions:
    """Builds transport options once per process."""
    config_kwargs = {
        "read_timeout": settings.timeout_ms / 1000,
        "connect_timeout": min(CONNECT_TIMEOUT_SECONDS, settings.timeout_ms / 1000),
        "retries": {"max_attempts": 1, "mode": "standard"},
    }
    if settings.proxy:
        config_kwargs["proxies"] = {"http": settings.proxy, "https": settings.proxy}
        logger.info(f"Using HTTPS proxy {settings.proxy}")

    verify = None
    certs = _collect_ca_bundle(settings)
    if certs:
        verify = _write_ca_bundle(certs)
        if settings.proxy:
            config_kwargs["proxies_config"] = {"proxy_ca_bundle": verify}

    return TransportOptions(config=Config(**config_kwargs), verify=verify)
