from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from epr.endpoints import KubernetesEndpointSource
from epr.errors import EPRError
from epr.kube import load_core_api
from epr.logs import log_event, setup_logging
from epr.options import ControllerOptions
from epr.reconciler import Reconciler
from epr.render import TemplateRenderer
from epr.settings import Settings
from epr.store import ConfigStore
from epr.supervisor import ProcessSupervisor

log = logging.getLogger("epr.cli")

EXIT_FATAL = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def build_parser(defaults: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="epr",
        usage="%(prog)s [OPTIONS] [POOL-NAME]",
        description="Keep a twemproxy configuration in sync with a Kubernetes Endpoints object "
        "and supervise the proxy process.",
    )
    p.add_argument("pool_name", nargs="?", default=defaults.pool_name, metavar="POOL-NAME",
                   help=f"Endpoints object to follow (default: {defaults.pool_name})")
    p.add_argument("--kubeconfig", default=defaults.kubeconfig,
                   help="absolute path to the kubeconfig file (in-cluster config when omitted)")
    p.add_argument("--template", dest="template_path", default=defaults.template_path,
                   help="absolute path to the template file")
    p.add_argument("--config", dest="config_path", default=defaults.config_path,
                   help="absolute path to the config file")
    p.add_argument("--twemproxy", dest="proxy_binary", default=defaults.proxy_binary,
                   help="absolute path to the twemproxy binary")
    p.add_argument("--port-name", default=defaults.port_name, help="memcached service port name")
    p.add_argument("--interval", dest="poll_interval_s", type=float, default=defaults.poll_interval_s,
                   help="seconds between reconciliation ticks")
    p.add_argument("--proxy-verbosity", type=int, default=defaults.proxy_verbosity,
                   help="log verbosity passed to the proxy as -v")
    p.add_argument("--log-level", default=defaults.log_level, help="controller log level")
    return p


def parse_options(argv: list[str] | None, defaults: Settings | None = None) -> ControllerOptions:
    """Parse argv into validated options; raises SystemExit(2) on bad input."""
    defaults = defaults or Settings.from_env()
    parser = build_parser(defaults)
    args = parser.parse_args(argv)
    try:
        return ControllerOptions(
            pool_name=args.pool_name,
            namespace=defaults.namespace,
            port_name=args.port_name,
            kubeconfig=args.kubeconfig,
            template_path=args.template_path,
            config_path=args.config_path,
            proxy_binary=args.proxy_binary,
            proxy_verbosity=args.proxy_verbosity,
            poll_interval_s=args.poll_interval_s,
            api_timeout_s=defaults.api_timeout_s,
            log_level=args.log_level,
        )
    except ValidationError as e:
        parser.error(str(e))
        raise  # parser.error exits


def build_reconciler(opts: ControllerOptions) -> Reconciler:
    source = KubernetesEndpointSource(
        load_core_api(opts.kubeconfig),
        namespace=opts.namespace,
        port_name=opts.port_name,
        timeout_s=opts.api_timeout_s,
    )
    return Reconciler(
        source=source,
        renderer=TemplateRenderer(opts.template_path),
        store=ConfigStore(opts.config_path),
        supervisor=ProcessSupervisor(),
        command=opts.proxy_command,
        pool_name=opts.pool_name,
        namespace=opts.namespace,
        interval_s=opts.poll_interval_s,
    )


def run(opts: ControllerOptions, reconciler: Reconciler | None = None) -> int:
    log_event(
        "INFO",
        f"Starting: template={opts.template_path} config={opts.config_path} proxy={opts.proxy_binary}",
        pool=opts.pool_name,
        namespace=opts.namespace,
    )
    try:
        rec = reconciler or build_reconciler(opts)
    except EPRError as e:
        log.critical(f"Startup failed: {e}")
        return EXIT_FATAL
    except KeyboardInterrupt:
        log.info("Interrupted during startup")
        return EXIT_INTERRUPTED

    try:
        rec.run()
    except EPRError as e:
        log.critical(f"{type(e).__name__}: {e}")
        return EXIT_FATAL
    except KeyboardInterrupt:
        log.info("Interrupted, stopping proxy")
        return EXIT_INTERRUPTED
    finally:
        rec.close()
    return EXIT_FATAL


def main(argv: list[str] | None = None) -> int:
    opts = parse_options(argv)
    setup_logging(opts.log_level)
    return run(opts)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
