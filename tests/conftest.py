import sys
from dataclasses import dataclass, field

import pytest

# Ensure project root is importable (so `import cli` / `import epr` work without installing)
import os as _os
_project_root = _os.path.dirname(_os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from epr.models import Endpoint  # noqa: E402
from epr.supervisor import ProcessExit  # noqa: E402


TEMPLATE = """pool:
  listen: 127.0.0.1:22121
  servers:
{% for s in servers %}
    - {{ s }}:1
{% endfor %}
"""


@pytest.fixture
def template_path(tmp_path):
    p = tmp_path / "template.yaml"
    p.write_text(TEMPLATE)
    return str(p)


def ep(address: str, port: int = 11211) -> Endpoint:
    return Endpoint(address=address, port=port)


class FakeSource:
    """Returns queued endpoint lists, one per resolve call (the last one repeats)."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def resolve(self, pool_name):
        self.calls += 1
        if len(self.results) > 1:
            r = self.results.pop(0)
        else:
            r = self.results[0]
        if isinstance(r, Exception):
            raise r
        return list(r)


@dataclass
class FakeProcess:
    pid: int
    argv: list
    outcome: ProcessExit | None = None
    on_wait: object = None

    def wait(self, timeout=None):
        if self.on_wait is not None:
            self.on_wait(self, timeout)
        return self.outcome


@dataclass
class FakeSupervisor:
    """Records start/stop calls and tracks how many instances are alive at once."""

    events: list = field(default_factory=list)
    alive: set = field(default_factory=set)
    max_alive: int = 0
    next_pid: int = 100
    started: list = field(default_factory=list)
    start_error: Exception | None = None

    def start(self, argv):
        if self.start_error is not None:
            raise self.start_error
        self.next_pid += 1
        proc = FakeProcess(pid=self.next_pid, argv=list(argv))
        self.alive.add(proc.pid)
        self.max_alive = max(self.max_alive, len(self.alive))
        self.events.append(("start", proc.pid))
        self.started.append(proc)
        return proc

    def stop(self, proc):
        self.alive.discard(proc.pid)
        self.events.append(("stop", proc.pid))
        if proc.outcome is None:
            proc.outcome = ProcessExit(-9)
        return proc.outcome


class RecordingStore:
    def __init__(self, path):
        self.path = str(path)
        self.writes = []

    def persist(self, document):
        self.writes.append(document)
