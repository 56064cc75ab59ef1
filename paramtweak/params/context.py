"""
Live state that tweak operations read and replace.

A TweakContext bundles the parameter block, the listen sockets handed to
the serving side, and the OS collaborators used while validating.
"""

import logging
import socket
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from paramtweak.params.models import ParamSpec, StorageKind, zero_value
from paramtweak.params.system import ResolvedAddress, SystemIdentity, resolve

logger = logging.getLogger(__name__)


Resolver = Callable[[str, str], List[ResolvedAddress]]


class ParamBlock:
    """
    Live parameter values, one slot per descriptor ``priv`` key.

    Slots are replaced whole, never mutated in place, so a reader on
    another thread always sees either the old or the new value.
    """

    def __init__(self, specs: Optional[Iterable[ParamSpec]] = None):
        self._slots: Dict[str, Any] = {}
        for spec in specs or ():
            self.add(spec)

    def add(self, spec: ParamSpec) -> None:
        """Create the slot for a descriptor if it does not exist yet."""
        self._slots.setdefault(spec.priv, zero_value(spec.kind))

    def get(self, priv: str) -> Any:
        return self._slots[priv]

    def store(self, priv: str, value: Any) -> None:
        self._slots[priv] = value

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._slots)

    def __contains__(self, priv: str) -> bool:
        return priv in self._slots


@dataclass
class ListenSock:
    """A resolved endpoint the serving side will bind."""
    name: str
    addr: ResolvedAddress
    sock: Optional[socket.socket] = None

    def close(self) -> None:
        """Release the socket handle, if one was ever attached."""
        if self.sock is not None:
            self.sock.close()
            self.sock = None


@dataclass
class Heritage:
    """State inherited by the serving side: the listen sockets."""
    socks: List[ListenSock] = field(default_factory=list)
    nsocks: int = 0


@dataclass
class TweakContext:
    """Everything a tweak operation may read or replace."""
    params: ParamBlock = field(default_factory=ParamBlock)
    heritage: Heritage = field(default_factory=Heritage)
    resolver: Resolver = resolve
    identity: Any = field(default_factory=SystemIdentity)
    listen_service: str = "http"

    def slot(self, par: ParamSpec, kind: StorageKind) -> Any:
        """Get the live value of a parameter, checking its storage kind."""
        if par.kind is not kind:
            raise TypeError(
                f"Parameter {par.name} stores {par.kind.value}, not {kind.value}"
            )
        if par.priv not in self.params:
            self.params.add(par)
        return self.params.get(par.priv)

    def commit(self, par: ParamSpec, value: Any) -> None:
        """Replace the live value of a parameter in one store."""
        self.params.store(par.priv, value)


def clean_listen_socks(socks: List[ListenSock]) -> None:
    """Release every record in a listen-socket list and empty it."""
    while socks:
        socks.pop(0).close()
