"""
Warnings about the document, as opposed to errors in the program.

Nothing that an author can write should stop a build: a reference to a missing target still renders (as "??"),
a duplicate label is dropped. Those problems are reported through a DiagnosticSink attached to the ReferenceState.
The sink is optional. Without one, warnings are dropped.

`DiagnosticLog` is the standard sink. It keeps every Diagnostic for the caller to inspect
(e.g. to print a summary at the end of a site build) and also forwards each one to the `logging` module.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol

from docrefs.doc.nodes import Node

SOURCE = "docrefs:enumerate"

logger = logging.getLogger(__name__)


class DiagnosticSink(Protocol):
    def warn(
        self,
        message: str,
        node: Node,
        note: Optional[str] = None,
        source: str = SOURCE,
    ) -> None: ...


@dataclass(frozen=True)
class Diagnostic:
    message: str
    node: Node
    note: Optional[str] = None
    source: str = SOURCE

    @property
    def position(self) -> Optional[Any]:
        return self.node.extra.get("position")

    def __str__(self) -> str:
        s = self.message
        start = (self.position or {}).get("start")
        if start:
            s = f"{start.get('line')}:{start.get('column')} {s}"
        if self.note:
            s += f"\n  {self.note}"
        return s


class DiagnosticLog(DiagnosticSink):
    """Collects diagnostics in order, and logs each at WARNING level.

    `name` identifies the document being built (usually the page path) and is prefixed to the log messages."""

    name: Optional[str]
    diagnostics: List[Diagnostic]

    def __init__(
        self, name: Optional[str] = None, log: Optional[logging.Logger] = None
    ) -> None:
        self.name = name
        self.diagnostics = []
        self._log = log if log is not None else logger

    def warn(
        self,
        message: str,
        node: Node,
        note: Optional[str] = None,
        source: str = SOURCE,
    ) -> None:
        d = Diagnostic(message=message, node=node, note=note, source=source)
        self.diagnostics.append(d)
        if self.name:
            self._log.warning("%s: %s [%s]", self.name, d, source)
        else:
            self._log.warning("%s [%s]", d, source)

    @property
    def messages(self) -> List[str]:
        return [d.message for d in self.diagnostics]


def warn(
    sink: Optional[DiagnosticSink],
    message: str,
    node: Node,
    note: Optional[str] = None,
) -> None:
    """Report a warning if there's a sink to report it to."""
    if sink is None:
        logger.debug("Dropped warning (no diagnostics sink): %s", message)
        return
    sink.warn(message, node, note=note, source=SOURCE)
