"""In-memory provider that simulates a cloud API (optional latency and faults)."""

import asyncio
import uuid
from collections import defaultdict, deque
from typing import Any, Deque, Dict, List, Optional, Tuple
from ..model.resources import ResourceKind
from ..state.models import ProviderState
from ..utils.errors import PermanentProviderError, TransientProviderError
from ..utils.logging import get_logger
from .base import Provider, ProviderResult

logger = get_logger("providers.simulated")

ID_PREFIXES = {
    ResourceKind.NETWORK: "vpc",
    ResourceKind.SUBNET: "subnet",
    ResourceKind.SECURITY_GROUP: "sg",
    ResourceKind.SECURITY_RULE: "sgr",
    ResourceKind.INSTANCE: "i",
    ResourceKind.LOAD_BALANCER: "lb",
    ResourceKind.LISTENER: "lsnr",
    ResourceKind.TARGET_GROUP: "tg",
    ResourceKind.DISTRIBUTION: "dist",
}


class SimulatedProvider(Provider):
    """
    Provider backed by a dict.

    Failures can be queued per (operation, kind) with inject_failure();
    each queued failure is consumed by the next matching call.
    """

    name = "simulated"

    def __init__(self, latency: float = 0.0):
        self.latency = latency
        self.resources: Dict[str, Tuple[ResourceKind, Dict[str, Any]]] = {}
        self.calls: List[Tuple[str, str, str]] = []
        self._failures: Dict[Tuple[str, ResourceKind], Deque[bool]] = defaultdict(deque)

    @classmethod
    def from_state(cls, state: ProviderState, latency: float = 0.0) -> "SimulatedProvider":
        """Seed the simulated API with resources recorded in state."""
        provider = cls(latency=latency)
        for entry in state.entries.values():
            provider.resources[entry.provider_id] = (ResourceKind(entry.kind), dict(entry.config))
        return provider

    def inject_failure(self, operation: str, kind: ResourceKind, transient: bool = True, times: int = 1) -> None:
        """Make the next `times` calls of operation on kind fail."""
        for _ in range(times):
            self._failures[(operation, ResourceKind(kind))].append(transient)

    def pending_failures(self, operation: Optional[str] = None) -> int:
        """Number of queued failures not yet consumed."""
        return sum(
            len(queue) for (op, _), queue in self._failures.items()
            if operation is None or op == operation
        )

    async def create(self, kind: ResourceKind, config: Dict[str, Any]) -> ProviderResult:
        kind = ResourceKind(kind)
        await self._call("create", kind, "-")
        provider_id = f"{ID_PREFIXES[kind]}-{uuid.uuid4().hex[:17]}"
        self.resources[provider_id] = (kind, dict(config))
        logger.debug(f"Created {kind.value} {provider_id}")
        return ProviderResult(provider_id=provider_id, outputs=self._outputs(kind, provider_id, config))

    async def update(self, kind: ResourceKind, provider_id: str, config: Dict[str, Any]) -> ProviderResult:
        kind = ResourceKind(kind)
        await self._call("update", kind, provider_id)
        self._require(kind, provider_id)
        self.resources[provider_id] = (kind, dict(config))
        logger.debug(f"Updated {kind.value} {provider_id}")
        return ProviderResult(provider_id=provider_id, outputs=self._outputs(kind, provider_id, config))

    async def delete(self, kind: ResourceKind, provider_id: str) -> None:
        kind = ResourceKind(kind)
        await self._call("delete", kind, provider_id)
        self._require(kind, provider_id)
        del self.resources[provider_id]
        logger.debug(f"Deleted {kind.value} {provider_id}")

    async def _call(self, operation: str, kind: ResourceKind, provider_id: str) -> None:
        self.calls.append((operation, kind.value, provider_id))
        if self.latency:
            await asyncio.sleep(self.latency)
        pending = self._failures.get((operation, kind))
        if pending:
            transient = pending.popleft()
            if transient:
                raise TransientProviderError(f"Simulated throttling on {operation} {kind.value}")
            raise PermanentProviderError(f"Simulated rejection of {operation} {kind.value}")

    def _require(self, kind: ResourceKind, provider_id: str) -> None:
        existing = self.resources.get(provider_id)
        if existing is None:
            raise PermanentProviderError(f"{kind.value} {provider_id} not found")
        if existing[0] != kind:
            raise PermanentProviderError(f"{provider_id} is a {existing[0].value}, not a {kind.value}")

    @staticmethod
    def _outputs(kind: ResourceKind, provider_id: str, config: Dict[str, Any]) -> Dict[str, Any]:
        outputs: Dict[str, Any] = {"arn": f"arn:sim:{kind.value}/{provider_id}"}
        if kind == ResourceKind.LOAD_BALANCER:
            outputs["dns_name"] = f"{provider_id}.elb.simulated.internal"
        elif kind == ResourceKind.DISTRIBUTION:
            outputs["dns_name"] = f"{provider_id.split('-', 1)[1]}.cdn.simulated.net"
        elif kind == ResourceKind.INSTANCE:
            outputs["private_ip"] = _fake_ip(provider_id)
        return outputs


def _fake_ip(provider_id: str) -> str:
    digest = uuid.uuid5(uuid.NAMESPACE_OID, provider_id).bytes
    return f"10.0.{digest[0]}.{max(digest[1], 4)}"

