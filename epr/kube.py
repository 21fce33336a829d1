from __future__ import annotations

import yaml
from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

from .errors import ConfigurationError


def load_core_api(kubeconfig: str | None = None) -> client.CoreV1Api:
    """CoreV1Api for the given kubeconfig, or for the pod's service account when unset.

    A private Configuration is used so the client library's global default is left alone.
    """
    cfg = client.Configuration()
    try:
        if kubeconfig:
            config.load_kube_config(config_file=kubeconfig, client_configuration=cfg)
        else:
            config.load_incluster_config(client_configuration=cfg)
    except (ConfigException, OSError, yaml.YAMLError) as e:
        source = f"kubeconfig '{kubeconfig}'" if kubeconfig else "in-cluster service account"
        raise ConfigurationError(f"Cannot load Kubernetes config from {source}: {e}") from e
    return client.CoreV1Api(client.ApiClient(cfg))
