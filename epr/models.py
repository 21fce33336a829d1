from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field


# Rendered configuration text. The loop only ever compares documents for equality.
ConfigDocument = str

# Designated value for "no backends, no process running".
EMPTY_DOCUMENT: ConfigDocument = ""


@dataclass(frozen=True, order=True)
class Endpoint:
    address: str
    port: int

    def __str__(self) -> str:
        return f"{self.address}:{self.port}"


def canonicalize(endpoints: Iterable[Endpoint]) -> tuple[Endpoint, ...]:
    """Return the endpoints de-duplicated and sorted by (address, port)."""
    return tuple(sorted(set(endpoints)))


# --- Kubernetes wire models (core/v1 Endpoints) ---


class _Wire(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class EndpointAddress(_Wire):
    ip: str


class EndpointPort(_Wire):
    name: str | None = None
    port: int = Field(..., ge=1, le=65535)
    protocol: str | None = None


class EndpointSubset(_Wire):
    addresses: list[EndpointAddress] = Field(default_factory=list)
    not_ready_addresses: list[EndpointAddress] = Field(default_factory=list, alias="notReadyAddresses")
    ports: list[EndpointPort] = Field(default_factory=list)

    def port_named(self, name: str) -> int | None:
        for p in self.ports:
            if p.name == name:
                return p.port
        return None


class EndpointsObject(_Wire):
    kind: str | None = None
    subsets: list[EndpointSubset] = Field(default_factory=list)
