from __future__ import annotations

import logging

from kubernetes.client import ApiException, CoreV1Api
from pydantic import ValidationError
from urllib3.exceptions import HTTPError

from .errors import ResolutionError
from .models import Endpoint, EndpointsObject, canonicalize

log = logging.getLogger(__name__)


class KubernetesEndpointSource:
    """Resolves a pool name to the ready addresses of its core/v1 Endpoints object.

    Only the port whose name matches ``port_name`` is used; subsets that do not
    expose it are skipped. ``notReadyAddresses`` are never returned.
    """

    def __init__(
        self,
        core_api: CoreV1Api,
        namespace: str = "default",
        port_name: str = "memcached",
        timeout_s: float = 10.0,
    ):
        self.core_api = core_api
        self.namespace = namespace
        self.port_name = port_name
        self.timeout_s = timeout_s

    def _fetch(self, pool_name: str) -> EndpointsObject:
        try:
            obj = self.core_api.read_namespaced_endpoints(
                pool_name, self.namespace, _request_timeout=self.timeout_s
            )
        except ApiException as e:
            raise ResolutionError(pool_name, self.namespace, f"HTTP {e.status} {e.reason}") from e
        except HTTPError as e:
            raise ResolutionError(pool_name, self.namespace, f"{type(e).__name__}: {e}") from e

        # Back to the API's camelCase dict, then validated (ports in range, ips present).
        payload = self.core_api.api_client.sanitize_for_serialization(obj)
        try:
            return EndpointsObject.model_validate(payload or {})
        except ValidationError as e:
            raise ResolutionError(pool_name, self.namespace, f"Malformed Endpoints object: {e}") from e

    def resolve(self, pool_name: str) -> tuple[Endpoint, ...]:
        obj = self._fetch(pool_name)
        found: list[Endpoint] = []
        for idx, subset in enumerate(obj.subsets):
            port = subset.port_named(self.port_name)
            if port is None:
                # A subset without the named port is skipped, it does not empty the pool.
                log.warning(
                    f"Endpoints '{self.namespace}/{pool_name}' subset #{idx} has no port named "
                    f"'{self.port_name}'; skipping {len(subset.addresses)} address(es)"
                )
                continue
            found.extend(Endpoint(address=a.ip, port=port) for a in subset.addresses)
        return canonicalize(found)
