from __future__ import annotations

import os
import tempfile
from pathlib import Path

from .errors import PersistError
from .models import ConfigDocument

FILE_MODE = 0o644


class ConfigStore:
    """Owns the proxy configuration file.

    Content is written to a sibling temp file and renamed over the target, so a
    freshly launched proxy reads either the previous or the new document.
    """

    def __init__(self, path: str):
        self.path = str(path)

    def persist(self, document: ConfigDocument) -> None:
        target = Path(self.path)
        tmp_path: str | None = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(document)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, FILE_MODE)
            os.replace(tmp_path, target)
            tmp_path = None
        except OSError as e:
            raise PersistError(self.path, str(e)) from e
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
