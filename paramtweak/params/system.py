"""
Operating system collaborators for tweak operations.

Address resolution for listen addresses and user/group lookups. Tweak
operations reach these through the context, so tests can substitute
fakes with the same shape.
"""

import logging
import os
import socket
from dataclasses import dataclass
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedAddress:
    """One socket address produced by resolution."""
    family: int
    socktype: int
    proto: int
    sockaddr: tuple

    @property
    def host(self) -> str:
        return self.sockaddr[0]

    @property
    def port(self) -> int:
        return self.sockaddr[1]

    def __str__(self) -> str:
        if self.family == socket.AF_INET6:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def split_address(text: str) -> Optional[Tuple[Optional[str], Optional[str]]]:
    """
    Split a listen token into host and port.

    Accepted forms: ``[::1]:80``, ``[::1]``, ``host:port``, ``host port``,
    ``:port`` and a bare ``host``. A missing host means all interfaces.

    Returns:
        (host, port), or None if the bracketed form is malformed
    """
    if text.startswith("["):
        close = text.find("]")
        if close <= 1:
            return None
        tail = text[close + 1:]
        if tail and not tail.startswith(":"):
            return None
        return text[1:close], (tail[1:] if tail else None)

    sep = text.find(" ")
    if sep < 0:
        sep = text.find(":")
    if sep < 0:
        return text, None
    return (text[:sep] or None), text[sep + 1:]


def resolve(text: str, service: str = "http") -> List[ResolvedAddress]:
    """
    Resolve a listen token to the stream socket addresses it names.

    Args:
        text: Listen token such as ``"localhost:8080"`` or ``":80"``
        service: Port or service name used when the token has none

    Returns:
        Resolved addresses in resolver order; empty if the token is
        malformed or does not resolve
    """
    parts = split_address(text)
    if parts is None:
        return []
    host, port = parts

    try:
        infos = socket.getaddrinfo(
            host,
            port or service,
            socket.AF_UNSPEC,
            socket.SOCK_STREAM,
            0,
            socket.AI_PASSIVE,
        )
    except (socket.gaierror, UnicodeError) as e:
        logger.debug(f"Cannot resolve {text!r}: {e}")
        return []

    return [
        ResolvedAddress(family=family, socktype=socktype, proto=proto, sockaddr=sockaddr)
        for family, socktype, proto, _canonname, sockaddr in infos
    ]


class SystemIdentity:
    """User and group lookups against the local account database."""

    def lookup_user(self, name: str) -> Optional[Tuple[int, str]]:
        """Get (uid, canonical name) for a user, or None if unknown."""
        import pwd

        try:
            pw = pwd.getpwnam(name)
        except KeyError:
            return None
        return pw.pw_uid, pw.pw_name

    def lookup_group(self, name: str) -> Optional[Tuple[int, str]]:
        """Get (gid, canonical name) for a group, or None if unknown."""
        import grp

        try:
            gr = grp.getgrnam(name)
        except KeyError:
            return None
        return gr.gr_gid, gr.gr_name

    def real_uid(self) -> int:
        return os.getuid()

    def real_gid(self) -> int:
        return os.getgid()
