"""Endpoint Proxy Reconciler (EPR).

Sidecar controller that:
 - polls a Kubernetes Endpoints object for the members of a backend pool
 - renders a proxy configuration (twemproxy by default) from a Jinja2 template
 - writes it atomically and replaces the proxy process whenever it changes
 - exits when the proxy dies on its own, leaving restarts to the outer manager

Every failure is fatal: the controller is meant to be restarted whole by its pod.
"""

__version__ = "0.1.0"
