from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .supervisor import ProcessExit


class EPRError(Exception):
    """Base class for every fatal controller error."""


class ConfigurationError(EPRError):
    pass


class ResolutionError(EPRError):
    def __init__(self, pool: str, namespace: str, detail: str):
        self.pool = pool
        self.namespace = namespace
        self.detail = detail
        super().__init__(f"Cannot resolve endpoints '{pool}' (namespace {namespace}): {detail}")


class RenderError(EPRError):
    def __init__(self, template: str, detail: str):
        self.template = template
        self.detail = detail
        super().__init__(f"Cannot render template '{template}': {detail}")


class PersistError(EPRError):
    def __init__(self, path: str, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"Cannot write config '{path}': {detail}")


class ProcessStartError(EPRError):
    def __init__(self, argv: Sequence[str], detail: str):
        self.argv = list(argv)
        self.detail = detail
        super().__init__(f"Cannot launch '{self.argv[0] if self.argv else '?'}': {detail}")


class ProcessCrash(EPRError):
    def __init__(self, pid: int, outcome: "ProcessExit"):
        self.pid = pid
        self.outcome = outcome
        super().__init__(f"Proxy process {pid} died: {outcome.describe()}")
