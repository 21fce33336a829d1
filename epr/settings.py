from __future__ import annotations

import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_str(name: str, default: str | None) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass(frozen=True)
class Settings:
    # Discovery
    pool_name: str = "memcached"
    namespace: str = "default"
    port_name: str = "memcached"
    kubeconfig: str | None = None
    api_timeout_s: float = 10.0

    # Rendering / proxy
    template_path: str = "/etc/twemproxy/template.yaml"
    config_path: str = "/etc/twemproxy/config.yaml"
    proxy_binary: str = "/usr/sbin/nutcracker"
    proxy_verbosity: int = 11

    # Loop
    poll_interval_s: float = 10.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from EPR_* variables (and KUBE_NAMESPACE), keeping defaults for unset ones."""
        d = cls()
        return cls(
            pool_name=_env_str("EPR_POOL_NAME", d.pool_name),
            namespace=_env_str("KUBE_NAMESPACE", d.namespace),
            port_name=_env_str("EPR_PORT_NAME", d.port_name),
            kubeconfig=_env_str("EPR_KUBECONFIG", d.kubeconfig),
            api_timeout_s=_env_float("EPR_API_TIMEOUT_S", d.api_timeout_s),
            template_path=_env_str("EPR_TEMPLATE_PATH", d.template_path),
            config_path=_env_str("EPR_CONFIG_PATH", d.config_path),
            proxy_binary=_env_str("EPR_PROXY_BINARY", d.proxy_binary),
            proxy_verbosity=_env_int("EPR_PROXY_VERBOSITY", d.proxy_verbosity),
            poll_interval_s=_env_float("EPR_POLL_INTERVAL_S", d.poll_interval_s),
            log_level=_env_str("EPR_LOG_LEVEL", d.log_level),
        )
