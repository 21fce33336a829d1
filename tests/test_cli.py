import logging

import pytest

import cli
from epr.errors import ProcessCrash, RenderError
from epr.settings import Settings
from epr.supervisor import ProcessExit


def test_defaults_match_twemproxy_layout(monkeypatch):
    for name in ("KUBE_NAMESPACE", "EPR_POOL_NAME", "EPR_POLL_INTERVAL_S", "EPR_CONFIG_PATH"):
        monkeypatch.delenv(name, raising=False)
    opts = cli.parse_options([])
    assert opts.pool_name == "memcached"
    assert opts.namespace == "default"
    assert opts.port_name == "memcached"
    assert opts.kubeconfig is None
    assert opts.template_path == "/etc/twemproxy/template.yaml"
    assert opts.config_path == "/etc/twemproxy/config.yaml"
    assert opts.poll_interval_s == 10.0
    assert opts.proxy_command("/etc/twemproxy/config.yaml") == [
        "/usr/sbin/nutcracker", "-v", "11", "-c", "/etc/twemproxy/config.yaml",
    ]


def test_flags_and_environment(monkeypatch):
    monkeypatch.setenv("KUBE_NAMESPACE", "cache")
    monkeypatch.setenv("EPR_POLL_INTERVAL_S", "2.5")
    monkeypatch.setenv("EPR_PROXY_VERBOSITY", "not-a-number")
    opts = cli.parse_options(["--port-name", "mc", "--twemproxy", "/opt/nutcracker", "sessions"])
    assert opts.pool_name == "sessions"
    assert opts.namespace == "cache"
    assert opts.port_name == "mc"
    assert opts.poll_interval_s == 2.5
    assert opts.proxy_verbosity == 11
    assert opts.proxy_command("/c.yaml")[0] == "/opt/nutcracker"


@pytest.mark.parametrize("argv", [["--interval", "0"], ["--proxy-verbosity", "12"], ["--log-level", "LOUD"], [""]])
def test_invalid_options_exit_2(argv):
    with pytest.raises(SystemExit) as ei:
        cli.parse_options(argv, Settings())
    assert ei.value.code == 2


class StubReconciler:
    def __init__(self, exc):
        self.exc = exc
        self.closed = False

    def run(self):
        raise self.exc

    def close(self):
        self.closed = True


def test_run_exit_codes(caplog):
    opts = cli.parse_options([], Settings())

    crash = StubReconciler(ProcessCrash(42, ProcessExit(1)))
    with caplog.at_level(logging.CRITICAL):
        assert cli.run(opts, crash) == cli.EXIT_FATAL
    assert crash.closed
    assert "died: exit status 1" in caplog.text

    bad_template = StubReconciler(RenderError("/t.yaml", "TemplateSyntaxError: boom"))
    assert cli.run(opts, bad_template) == cli.EXIT_FATAL
    assert bad_template.closed

    interrupted = StubReconciler(KeyboardInterrupt())
    assert cli.run(opts, interrupted) == cli.EXIT_INTERRUPTED
    assert interrupted.closed


def test_startup_configuration_error(monkeypatch):
    monkeypatch.delenv("KUBERNETES_SERVICE_HOST", raising=False)
    opts = cli.parse_options([], Settings())
    assert cli.run(opts) == cli.EXIT_FATAL


def test_interrupt_during_startup(monkeypatch):
    def interrupted(opts):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "build_reconciler", interrupted)
    opts = cli.parse_options([], Settings())
    assert cli.run(opts) == cli.EXIT_INTERRUPTED
