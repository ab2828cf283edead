"""Tests for the simulated provider."""

import asyncio
import pytest
from stackplan.model.resources import ResourceKind
from stackplan.providers.simulated import SimulatedProvider
from stackplan.state.models import ProviderState, StateEntry
from stackplan.utils.errors import PermanentProviderError, TransientProviderError


class TestSimulatedProvider:

    def test_create_update_delete(self):
        provider = SimulatedProvider()

        async def scenario():
            created = await provider.create(ResourceKind.LOAD_BALANCER, {"subnets": ["subnet-1"]})
            assert created.provider_id.startswith("lb-")
            assert created.outputs["dns_name"].startswith(created.provider_id)
            updated = await provider.update(ResourceKind.LOAD_BALANCER, created.provider_id, {"subnets": []})
            assert updated.provider_id == created.provider_id
            await provider.delete(ResourceKind.LOAD_BALANCER, created.provider_id)

        asyncio.run(scenario())
        assert provider.resources == {}
        assert [op for op, _, _ in provider.calls] == ["create", "update", "delete"]

    def test_unknown_resource_is_permanent_error(self):
        provider = SimulatedProvider()
        with pytest.raises(PermanentProviderError, match="not found"):
            asyncio.run(provider.delete(ResourceKind.NETWORK, "vpc-missing"))

    def test_kind_mismatch(self):
        state = ProviderState()
        state.entries["net"] = StateEntry(kind=ResourceKind.NETWORK, provider_id="vpc-1")
        provider = SimulatedProvider.from_state(state)
        with pytest.raises(PermanentProviderError, match="not a subnet"):
            asyncio.run(provider.delete(ResourceKind.SUBNET, "vpc-1"))

    def test_injected_failures_consumed_in_order(self):
        provider = SimulatedProvider()
        provider.inject_failure("create", ResourceKind.NETWORK, transient=True)
        provider.inject_failure("create", ResourceKind.NETWORK, transient=False)
        assert provider.pending_failures() == 2

        with pytest.raises(TransientProviderError):
            asyncio.run(provider.create(ResourceKind.NETWORK, {}))
        with pytest.raises(PermanentProviderError):
            asyncio.run(provider.create(ResourceKind.NETWORK, {}))
        result = asyncio.run(provider.create(ResourceKind.NETWORK, {}))

        assert result.provider_id.startswith("vpc-")
        assert provider.pending_failures("create") == 0
