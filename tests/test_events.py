"""Tests for the lifecycle event bus."""

import asyncio

import pytest

from devhub.events import ConfigUpdated, EventBus, ServiceRegistered, StatusChanged
from devhub.models import ServiceDescriptor, ServiceKind, ServiceStatus


@pytest.fixture
def service():
    return ServiceDescriptor(id="gh", name="GitHub", kind=ServiceKind.GITHUB)


class TestSubscribe:
    """Subscription filtering and unsubscribe."""

    @pytest.mark.asyncio
    async def test_handler_receives_all_variants(self, service):
        """A subscription without types receives every variant."""
        bus = EventBus()
        received = []
        bus.subscribe(received.append)

        await bus.publish(ServiceRegistered(service))
        await bus.publish(StatusChanged("gh", ServiceStatus.CONNECTED, service))
        await bus.publish(ConfigUpdated(service))

        assert [type(e) for e in received] == [ServiceRegistered, StatusChanged, ConfigUpdated]

    @pytest.mark.asyncio
    async def test_type_filter(self, service):
        """Typed subscriptions only see their variant."""
        bus = EventBus()
        received = []
        bus.subscribe(received.append, StatusChanged)

        await bus.publish(ServiceRegistered(service))
        await bus.publish(StatusChanged("gh", ServiceStatus.ERROR, service))

        assert [e.status for e in received] == [ServiceStatus.ERROR]

    def test_unknown_event_type_rejected(self):
        bus = EventBus()

        with pytest.raises(TypeError):
            bus.subscribe(print, dict)

    @pytest.mark.asyncio
    async def test_unsubscribe(self, service):
        """The returned callable removes the subscription."""
        bus = EventBus()
        received = []
        unsubscribe = bus.subscribe(received.append)

        unsubscribe()
        unsubscribe()
        await bus.publish(ConfigUpdated(service))

        assert received == []
        assert bus.subscriber_count == 0


class TestPublish:
    @pytest.mark.asyncio
    async def test_async_handlers_are_awaited(self, service):
        """publish waits for async handlers."""
        bus = EventBus()
        received = []

        async def handler(event):
            await asyncio.sleep(0)
            received.append(event)

        bus.subscribe(handler)
        await bus.publish(ConfigUpdated(service))

        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_failing_handler_is_isolated(self, service):
        """A handler exception reaches neither the publisher nor other handlers."""
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("observer bug")

        bus.subscribe(broken)
        bus.subscribe(received.append)

        await bus.publish(StatusChanged("gh", ServiceStatus.CONNECTED, service))

        assert len(received) == 1

    def test_publish_nowait_runs_sync_handlers_inline(self, service):
        """Sync handlers run immediately without a loop."""
        bus = EventBus()
        received = []
        bus.subscribe(received.append)

        bus.publish_nowait(ServiceRegistered(service))

        assert len(received) == 1

    def test_publish_nowait_without_loop_drops_coroutines(self, service):
        """Async handlers are skipped when no loop is running."""
        bus = EventBus()
        calls = []

        async def handler(event):
            calls.append(event)

        bus.subscribe(handler)
        bus.publish_nowait(ServiceRegistered(service))

        assert calls == []

    @pytest.mark.asyncio
    async def test_publish_nowait_schedules_async_handlers(self, service):
        """Inside a loop, async handlers are scheduled and drain() waits for them."""
        bus = EventBus()
        calls = []

        async def handler(event):
            calls.append(event)

        bus.subscribe(handler)
        bus.publish_nowait(ServiceRegistered(service))
        await bus.drain()

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_clear(self, service):
        bus = EventBus()
        received = []
        bus.subscribe(received.append)

        bus.clear()
        await bus.publish(ConfigUpdated(service))

        assert received == []
