from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class ControllerOptions(BaseModel):
    pool_name: str = Field(..., min_length=1, description="Endpoints object to follow")
    namespace: str = Field(..., min_length=1, description="Namespace of the Endpoints object")
    port_name: str = Field(..., min_length=1, description="Named port selected in every subset")
    kubeconfig: str | None = Field(None, description="kubeconfig path; in-cluster config when unset")
    template_path: str = Field(..., min_length=1)
    config_path: str = Field(..., min_length=1)
    proxy_binary: str = Field(..., min_length=1)
    proxy_verbosity: int = Field(11, ge=0, le=11, description="Passed to the proxy as -v")
    poll_interval_s: float = Field(10.0, gt=0, le=86400)
    api_timeout_s: float = Field(10.0, gt=0)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("log level must be DEBUG, INFO, WARNING, ERROR or CRITICAL")
        return level

    def proxy_command(self, config_path: str) -> list[str]:
        """Invocation of the proxy for a given configuration file."""
        return [self.proxy_binary, "-v", str(self.proxy_verbosity), "-c", config_path]
