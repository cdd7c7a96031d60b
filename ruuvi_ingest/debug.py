"""Snapshot de depuración y página índice.

Guarda el último payload crudo y el último resultado de ingesta para la
página de debug. Es el único estado mutable compartido del servicio: un
lock protege cada lectura/escritura y el endpoint de ingesta lo escribe solo
después de terminar la decodificación.
"""

from __future__ import annotations

import html
import pprint
import threading
from dataclasses import dataclass
from typing import Optional

from .core.domain.outcome import IngestionOutcome


@dataclass(frozen=True)
class SnapshotView:
    last_raw: bytes = b""
    last_outcome: Optional[IngestionOutcome] = None


class DebugSnapshot:
    """Último payload recibido y su resultado."""

    def __init__(self):
        self._lock = threading.Lock()
        self._view = SnapshotView()

    def record(self, raw: bytes, outcome: IngestionOutcome) -> None:
        with self._lock:
            self._view = SnapshotView(last_raw=bytes(raw), last_outcome=outcome)

    def read(self) -> SnapshotView:
        with self._lock:
            return self._view


INDEX_PAGE = """
<html><body>
Ruuvi Station proxy server.
</body></html>
"""

_DEBUG_PAGE = """
<html><body>
<h1>Last parsed update</h1>
<pre>{parsed}</pre>
<h1>Last raw</h1>
<pre>{raw}</pre>
</body></html>
"""


def render_index(snapshot: DebugSnapshot, debug: bool) -> str:
    """Página índice: banner simple o, en modo debug, el último payload."""
    if not debug:
        return INDEX_PAGE

    view = snapshot.read()
    parsed = pprint.pformat(view.last_outcome.to_dict(), width=100) if view.last_outcome else "<nil>"
    raw = view.last_raw.decode("utf-8", errors="replace")
    return _DEBUG_PAGE.format(parsed=html.escape(parsed), raw=html.escape(raw))
