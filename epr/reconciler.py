from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from .errors import ProcessCrash
from .logs import log_event
from .models import EMPTY_DOCUMENT, ConfigDocument, Endpoint, canonicalize
from .supervisor import ProcessSupervisor, SupervisedProcess


class EndpointSource(Protocol):
    def resolve(self, pool_name: str) -> Sequence[Endpoint]: ...


class ConfigRenderer(Protocol):
    def render(self, endpoints: Sequence[Endpoint]) -> ConfigDocument: ...


class DocumentStore(Protocol):
    path: str

    def persist(self, document: ConfigDocument) -> None: ...


@dataclass
class ReconcilerState:
    """Loop-owned state; only the thread running the Reconciler touches it."""

    last_applied: ConfigDocument = EMPTY_DOCUMENT
    process: SupervisedProcess | None = None
    endpoint_count: int = 0


class Reconciler:
    """Keeps the proxy's configuration and process in line with the pool's endpoints.

    Every ``interval_s`` seconds: resolve -> render -> diff -> (persist, stop, start).
    Between ticks the loop waits on the current process, and an exit it did not
    ask for ends the loop with ProcessCrash. Every error is fatal.
    """

    def __init__(
        self,
        source: EndpointSource,
        renderer: ConfigRenderer,
        store: DocumentStore,
        supervisor: ProcessSupervisor,
        command: Callable[[str], list[str]],
        pool_name: str,
        namespace: str | None = None,
        interval_s: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self.source = source
        self.renderer = renderer
        self.store = store
        self.supervisor = supervisor
        self.command = command
        self.pool_name = pool_name
        self.namespace = namespace
        self.interval_s = float(interval_s)
        self.state = ReconcilerState()
        self._clock = clock
        self._sleep = sleep

    def _event(self, level: str, message: str) -> None:
        log_event(level, message, pool=self.pool_name, namespace=self.namespace)

    def desired_document(self) -> tuple[ConfigDocument, int]:
        """Resolve the pool and render its configuration; the empty pool renders nothing."""
        endpoints = canonicalize(self.source.resolve(self.pool_name))
        if not endpoints:
            return EMPTY_DOCUMENT, 0
        return self.renderer.render(endpoints), len(endpoints)

    def tick(self) -> bool:
        """One reconciliation pass. Returns True if the configuration changed."""
        document, count = self.desired_document()
        st = self.state
        if document == st.last_applied:
            return False

        self._event("INFO", f"Endpoints changed ({st.endpoint_count} -> {count}), writing new config")
        self.store.persist(document)

        # Stop before start: the old instance must be reaped before a new one may bind.
        if st.process is not None:
            self.supervisor.stop(st.process)
            st.process = None

        if document == EMPTY_DOCUMENT:
            self._event("WARN", "No endpoints available, waiting to launch proxy")
        else:
            st.process = self.supervisor.start(self.command(self.store.path))

        st.last_applied = document
        st.endpoint_count = count
        return True

    def run(self) -> None:
        """Reconcile forever. Only returns by raising (ProcessCrash or another EPRError).

        If a tick is due and the process has also exited, the tick runs first;
        a crash it does not replace away is reported right after it.
        """
        self._event("INFO", f"Reconciler started (interval {self.interval_s:g}s)")
        deadline = self._clock()
        while True:
            now = self._clock()
            if now >= deadline:
                self.tick()
                deadline += self.interval_s
                if deadline <= self._clock():
                    # Tick overran the interval: next one a full interval from now.
                    deadline = self._clock() + self.interval_s

            proc = self.state.process
            remaining = max(0.0, deadline - self._clock())
            if proc is None:
                self._sleep(remaining)
                continue

            outcome = proc.wait(remaining)
            if outcome is None:
                continue
            if self._clock() >= deadline:
                # Timer is due as well: let the tick go first.
                continue
            self._event("ERROR", f"Proxy died: {outcome.describe()}")
            raise ProcessCrash(proc.pid, outcome)

    def close(self) -> None:
        """Kill and reap the owned process, if any."""
        proc = self.state.process
        if proc is not None:
            self.supervisor.stop(proc)
            self.state.process = None
