"""DNS resolution backends for the endpoint validator.

The platform resolver is process-wide state, so the validator takes a
Resolver instance instead of calling getaddrinfo directly. SystemResolver
is the production backend; StaticResolver answers from a fixed table.
"""

from __future__ import annotations

import abc
import asyncio
import socket
from collections.abc import Iterable, Mapping


class ResolutionError(Exception):
    """Raised when a hostname cannot be resolved to any address."""

    def __init__(self, hostname: str, detail: str) -> None:
        self.hostname = hostname
        self.detail = detail
        super().__init__(f"Cannot resolve {hostname!r}: {detail}")


class Resolver(abc.ABC):
    """Abstract base for hostname resolution backends."""

    @abc.abstractmethod
    async def resolve(self, hostname: str) -> list[str]:
        """Resolve a hostname to all of its A and AAAA addresses.

        Args:
            hostname: A DNS name, never an IP literal.

        Returns:
            Address strings in resolver order, without duplicates.

        Raises:
            ResolutionError: If the name does not resolve.
        """


class SystemResolver(Resolver):
    """Resolves through the event loop's getaddrinfo (A and AAAA records)."""

    async def resolve(self, hostname: str) -> list[str]:
        loop = asyncio.get_running_loop()
        try:
            addr_infos = await loop.getaddrinfo(
                hostname, None, family=socket.AF_UNSPEC, type=socket.SOCK_STREAM
            )
        except socket.gaierror as exc:
            raise ResolutionError(hostname, str(exc)) from exc
        except (OSError, UnicodeError) as exc:
            raise ResolutionError(hostname, f"{type(exc).__name__}: {exc}") from exc

        return _unique(str(addr_info[4][0]) for addr_info in addr_infos)


class StaticResolver(Resolver):
    """Answers from a fixed hostname -> addresses table.

    Lookups are case-insensitive. Unknown names raise ResolutionError,
    like NXDOMAIN from a real resolver.

    Args:
        records: Mapping of hostname to the addresses it resolves to.
    """

    def __init__(self, records: Mapping[str, Iterable[str]]) -> None:
        self._records = {name.lower().rstrip("."): list(addrs) for name, addrs in records.items()}

    async def resolve(self, hostname: str) -> list[str]:
        addresses = self._records.get(hostname.lower().rstrip("."))
        if not addresses:
            raise ResolutionError(hostname, "no such host")
        return _unique(addresses)


def _unique(addresses: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for address in addresses:
        seen.setdefault(address, None)
    return list(seen)
