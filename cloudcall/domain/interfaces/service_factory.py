"""Interface for constructing provider service clients.

The request layer never touches the SDK module directly; it asks a
factory registered under a service identifier for a client bound to a
set of construction parameters.
"""

from typing import Any, Optional, Protocol

from cloudcall.domain.models.common import Credentials, Region


class ServiceFactory(Protocol):
    """Callable building one client/resource object."""

    def __call__(
        self,
        credentials: Credentials,
        region: Region,
        use_accelerate_endpoint: Optional[bool] = None,
    ) -> Any:
        ...
