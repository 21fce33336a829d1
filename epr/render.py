from __future__ import annotations

from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from .errors import RenderError
from .models import ConfigDocument, Endpoint, canonicalize


class TemplateRenderer:
    """Render a proxy configuration from a Jinja2 template file.

    The template sees:
      - ``endpoints``: Endpoint objects (``.address``, ``.port``) in canonical order
      - ``servers``: the same list as ``"address:port"`` strings

    The file is re-read on every render, so edits apply on the next change.
    """

    def __init__(self, template_path: str):
        self.template_path = str(template_path)

    def _environment(self) -> Environment:
        p = Path(self.template_path)
        return Environment(
            loader=FileSystemLoader(str(p.parent)),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False,
        )

    def render(self, endpoints: Sequence[Endpoint]) -> ConfigDocument:
        ordered = canonicalize(endpoints)
        try:
            tmpl = self._environment().get_template(Path(self.template_path).name)
            return tmpl.render(endpoints=list(ordered), servers=[str(e) for e in ordered])
        except TemplateError as e:
            raise RenderError(self.template_path, f"{type(e).__name__}: {e}") from e
        except OSError as e:
            raise RenderError(self.template_path, str(e)) from e
