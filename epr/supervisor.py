from __future__ import annotations

import logging
import queue
import signal
import subprocess
from dataclasses import dataclass
from threading import Lock, Thread
from typing import Sequence

from .errors import ProcessStartError

log = logging.getLogger(__name__)

# Instance states.
STARTING = "starting"
RUNNING = "running"
STOPPING = "stopping"
STOPPED = "stopped"


@dataclass(frozen=True)
class ProcessExit:
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def signal(self) -> int | None:
        return -self.returncode if self.returncode < 0 else None

    def describe(self) -> str:
        sig = self.signal
        if sig is not None:
            try:
                name = signal.Signals(sig).name
            except ValueError:
                name = f"signal {sig}"
            return f"killed by {name}"
        if self.success:
            return "exited cleanly"
        return f"exit status {self.returncode}"


class SupervisedProcess:
    """One launched process plus the listener thread that reaps it.

    The listener publishes exactly one ProcessExit to a single-slot queue.
    The first ``wait`` that receives it caches it, so later waits return the
    same outcome immediately.
    """

    def __init__(self, popen: subprocess.Popen, argv: Sequence[str]):
        self.popen = popen
        self.argv = list(argv)
        self.state = STARTING
        self._finished: queue.Queue[ProcessExit] = queue.Queue(maxsize=1)
        self._outcome: ProcessExit | None = None
        self._lock = Lock()
        self._thr = Thread(target=self._listen, name=f"proc-wait-{popen.pid}", daemon=True)
        self._thr.start()
        self.state = RUNNING

    @property
    def pid(self) -> int:
        return self.popen.pid

    def _listen(self) -> None:
        returncode = self.popen.wait()
        self._finished.put(ProcessExit(returncode))

    def wait(self, timeout: float | None = None) -> ProcessExit | None:
        """Block until the process has exited; None if ``timeout`` elapses first."""
        with self._lock:
            if self._outcome is not None:
                return self._outcome
        try:
            if timeout is not None and timeout <= 0:
                outcome = self._finished.get_nowait()
            else:
                outcome = self._finished.get(timeout=timeout)
        except queue.Empty:
            return None
        with self._lock:
            self._outcome = outcome
            if self.state != STOPPING:
                self.state = STOPPED
        return outcome

    def kill(self) -> None:
        """Send SIGKILL. A process that is already gone is not an error."""
        if self._outcome is None:
            self.state = STOPPING
        try:
            self.popen.kill()
        except ProcessLookupError:
            pass


class ProcessSupervisor:
    """Launches and stops the proxy, never more than one instance at a time."""

    def __init__(self) -> None:
        self.current: SupervisedProcess | None = None

    def start(self, argv: Sequence[str]) -> SupervisedProcess:
        if self.current is not None:
            raise RuntimeError(
                f"Refusing to start '{argv[0]}': process {self.current.pid} is not confirmed stopped."
            )
        try:
            # stdin/stdout/stderr are inherited so the proxy's output stays visible.
            popen = subprocess.Popen(list(argv))
        except OSError as e:
            raise ProcessStartError(argv, f"{type(e).__name__}: {e}") from e
        proc = SupervisedProcess(popen, argv)
        self.current = proc
        log.info(f"Started {argv[0]} (pid {proc.pid})")
        return proc

    def stop(self, proc: SupervisedProcess) -> ProcessExit:
        """Kill ``proc`` and block until its listener has reported the exit."""
        proc.kill()
        outcome = proc.wait()
        proc.state = STOPPED
        if self.current is proc:
            self.current = None
        log.info(f"Stopped {proc.argv[0]} (pid {proc.pid}): {outcome.describe()}")
        return outcome

    def shutdown(self) -> None:
        if self.current is not None:
            self.stop(self.current)
