"""Role-Based Access Control: capabilities, operation table and gate."""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Optional

from .directory import DirectoryClient
from .outcome import FailureKind, Outcome

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    """Static authorization levels; values match the directory role tokens."""
    USER = "USER"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller, as established by bearer-token verification."""
    principal: str
    capabilities: FrozenSet[Capability] = field(default_factory=frozenset)

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities


@dataclass(frozen=True)
class Operation:
    capability: Capability
    handler: Callable[..., Outcome]


def _client_method(name: str) -> Callable[..., Outcome]:
    def handler(client: DirectoryClient, *args: Any) -> Outcome:
        return getattr(client, name)(*args)
    handler.__name__ = name
    return handler


OPERATIONS: Dict[str, Operation] = {
    "get_by_id": Operation(Capability.USER, _client_method("get_by_id")),
    "get_by_email": Operation(Capability.USER, _client_method("get_by_email")),
    "list_all": Operation(Capability.USER, _client_method("list_all")),
    "create": Operation(Capability.ADMIN, _client_method("create")),
    "update": Operation(Capability.ADMIN, _client_method("update")),
    "update_role": Operation(Capability.ADMIN, _client_method("update_role")),
    "remove": Operation(Capability.ADMIN, _client_method("remove")),
}


def collect_capabilities(*sources) -> FrozenSet[Capability]:
    """Collect known capabilities from the ``roles``/``role`` claims of each source.

    Unknown role names are ignored.
    """
    granted = set()
    for source in sources:
        if not isinstance(source, dict):
            continue
        raw = source.get("roles")
        if raw is None:
            raw = source.get("role")
        if isinstance(raw, str):
            raw = raw.replace(",", " ").split()
        if not isinstance(raw, (list, tuple, set, frozenset)):
            continue
        for role in raw:
            try:
                granted.add(Capability(str(role).strip().upper()))
            except ValueError:
                continue
    return frozenset(granted)


def identity_from_claims(claims: dict) -> CallerIdentity:
    """Build a CallerIdentity from verified token claims."""
    principal = claims.get("sub") or claims.get("login") or claims.get("preferred_username") or ""
    return CallerIdentity(principal=str(principal), capabilities=collect_capabilities(claims))


def authorize(identity: Optional[CallerIdentity], operation: str) -> bool:
    """Return True when ``identity`` holds the capability ``operation`` requires.

    Capabilities are not hierarchical: ADMIN does not imply USER.

    Raises:
        KeyError: If ``operation`` is not in the operation table
    """
    required = OPERATIONS[operation].capability
    return identity is not None and identity.has(required)


def dispatch(
    identity: Optional[CallerIdentity],
    operation: str,
    client: DirectoryClient,
    *args: Any,
) -> Outcome:
    """Check the caller's capability, then run the operation on ``client``.

    An unauthorized caller gets an UNAUTHORIZED outcome and the client is
    never called.
    """
    if not authorize(identity, operation):
        return denial(identity, operation)
    return OPERATIONS[operation].handler(client, *args)


def denial(identity: Optional[CallerIdentity], operation: str) -> Outcome:
    """UNAUTHORIZED outcome naming the capability ``operation`` requires."""
    required = OPERATIONS[operation].capability.value
    principal = identity.principal if identity else "anonymous"
    logger.warning(f"Denied {operation} for {principal}: requires {required}")
    return Outcome.failure(FailureKind.UNAUTHORIZED, f"Required role: {required}")
