"""Tests for the dispatch engine."""

import asyncio
from typing import Any, Dict

import pytest

from src.pusher.channels.base import ChannelAdapter
from src.pusher.channels.registry import ChannelRegistry
from src.pusher.channels.types import OutgoingMessage, SendResult
from src.pusher.errors import ErrorCodes, ValidationError
from src.pusher.models.channel import Channel
from src.pusher.models.message import DeliveryStatus
from src.pusher.services.history_service import HistoryService
from src.pusher.services.push_service import PushRequest, PushService
from src.pusher.storage.channel_storage import ChannelStorage
from src.pusher.storage.memory import MemoryKVStore
from src.pusher.storage.message_storage import MessageStorage

# -- Helpers -----------------------------------------------------------------


class ScriptedAdapter(ChannelAdapter):
    """Adapter whose send() returns or raises a fixed outcome."""

    def __init__(self, channel_type: str, outcome: Any) -> None:
        super().__init__(client=None)
        self.type = channel_type
        self.outcome = outcome
        self.sent = []

    def build_payload(self, message: OutgoingMessage, credentials: Dict[str, str]) -> Dict[str, Any]:
        return {}

    async def send(self, message: OutgoingMessage, credentials: Dict[str, str]) -> SendResult:
        self.sent.append(message)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class RendezvousAdapter(ScriptedAdapter):
    """Succeeds only once `expected` sends are in flight at the same time."""

    def __init__(self, channel_type: str, expected: int) -> None:
        super().__init__(channel_type, SendResult(success=True))
        self.expected = expected
        self.arrived = 0
        self.all_arrived = asyncio.Event()

    async def send(self, message: OutgoingMessage, credentials: Dict[str, str]) -> SendResult:
        self.arrived += 1
        if self.arrived == self.expected:
            self.all_arrived.set()
        await asyncio.wait_for(self.all_arrived.wait(), timeout=1)
        return self.outcome


@pytest.fixture
def kv() -> MemoryKVStore:
    return MemoryKVStore()


def _service(kv: MemoryKVStore, *adapters: ChannelAdapter) -> PushService:
    return PushService(
        channel_storage=ChannelStorage(kv),
        history_service=HistoryService(MessageStorage(kv)),
        registry=ChannelRegistry(adapters),
    )


async def _add_channel(kv: MemoryKVStore, channel_type: str, enabled: bool = True) -> Channel:
    channel = Channel(account_id="acc-1", type=channel_type, name=channel_type, enabled=enabled)
    await ChannelStorage(kv).save(channel)
    return channel


# -- Fan-out -----------------------------------------------------------------


async def test_failing_channel_does_not_affect_others(kv) -> None:
    service = _service(
        kv,
        ScriptedAdapter("ok", SendResult(success=True, external_id="ext-1")),
        ScriptedAdapter("boom", RuntimeError("network down")),
    )
    channels = [
        await _add_channel(kv, "ok"),
        await _add_channel(kv, "boom"),
        await _add_channel(kv, "ok"),
    ]

    record = await service.push("acc-1", PushRequest(title="Hello", content="World"))

    assert [r.channel_id for r in record.delivery_results] == [c.id for c in channels]
    statuses = [r.status for r in record.delivery_results]
    assert statuses == [DeliveryStatus.SUCCESS, DeliveryStatus.FAILED, DeliveryStatus.SUCCESS]
    assert record.delivery_results[1].error == "network down"
    assert record.delivery_results[0].external_id == "ext-1"


async def test_malformed_adapter_outcome_fails_only_that_channel(kv) -> None:
    service = _service(
        kv,
        ScriptedAdapter("ok", SendResult(success=True)),
        ScriptedAdapter("weird", None),
    )
    first = await _add_channel(kv, "ok")
    await _add_channel(kv, "weird")
    third = await _add_channel(kv, "ok")

    record = await service.push("acc-1", PushRequest(title="Hello"))

    statuses = [r.status for r in record.delivery_results]
    assert statuses == [DeliveryStatus.SUCCESS, DeliveryStatus.FAILED, DeliveryStatus.SUCCESS]
    assert record.delivery_results[1].error
    assert record.delivery_results[0].channel_id == first.id
    assert record.delivery_results[2].channel_id == third.id
    assert await service.history_service.get("acc-1", record.id) is not None


async def test_sends_run_concurrently(kv) -> None:
    adapter = RendezvousAdapter("wait", expected=3)
    service = _service(kv, adapter)
    for _ in range(3):
        await _add_channel(kv, "wait")

    record = await service.push("acc-1", PushRequest(title="Hello"))

    assert all(r.status == DeliveryStatus.SUCCESS for r in record.delivery_results)


async def test_record_is_persisted_before_return(kv) -> None:
    service = _service(kv, ScriptedAdapter("ok", SendResult(success=True)))
    await _add_channel(kv, "ok")

    record = await service.push("acc-1", PushRequest(title="Hello"))

    stored = await service.history_service.get("acc-1", record.id)
    assert stored is not None
    assert stored.delivery_results[0].status == DeliveryStatus.SUCCESS


async def test_success_without_provider_id_uses_push_id(kv) -> None:
    service = _service(kv, ScriptedAdapter("ok", SendResult(success=True)))
    await _add_channel(kv, "ok")

    record = await service.push("acc-1", PushRequest(title="Hello"))

    assert record.delivery_results[0].external_id == record.id


async def test_adapter_reported_failure(kv) -> None:
    service = _service(kv, ScriptedAdapter("no", SendResult(success=False, error="40001: bad token")))
    await _add_channel(kv, "no")

    record = await service.push("acc-1", PushRequest(title="Hello"))

    result = record.delivery_results[0]
    assert result.status == DeliveryStatus.FAILED
    assert result.error == "40001: bad token"


# -- Target resolution -------------------------------------------------------


async def test_no_channels_still_records_push(kv) -> None:
    service = _service(kv, ScriptedAdapter("ok", SendResult(success=True)))

    record = await service.push("acc-1", PushRequest(title="Hello"))

    assert record.delivery_results == []
    assert await service.history_service.get("acc-1", record.id) is not None


async def test_disabled_channels_are_skipped(kv) -> None:
    adapter = ScriptedAdapter("ok", SendResult(success=True))
    service = _service(kv, adapter)
    enabled = await _add_channel(kv, "ok")
    await _add_channel(kv, "ok", enabled=False)

    record = await service.push("acc-1", PushRequest(title="Hello"))

    assert [r.channel_id for r in record.delivery_results] == [enabled.id]


async def test_explicit_channel(kv) -> None:
    service = _service(kv, ScriptedAdapter("ok", SendResult(success=True)))
    await _add_channel(kv, "ok")
    target = await _add_channel(kv, "ok")

    record = await service.push("acc-1", PushRequest(title="Hello", channel_id=target.id))

    assert [r.channel_id for r in record.delivery_results] == [target.id]


async def test_explicit_disabled_or_unknown_channel_sends_nothing(kv) -> None:
    adapter = ScriptedAdapter("ok", SendResult(success=True))
    service = _service(kv, adapter)
    disabled = await _add_channel(kv, "ok", enabled=False)

    first = await service.push("acc-1", PushRequest(title="Hello", channel_id=disabled.id))
    second = await service.push("acc-1", PushRequest(title="Hello", channel_id="missing"))

    assert first.delivery_results == []
    assert second.delivery_results == []
    assert adapter.sent == []


async def test_unknown_channel_type_fails_that_channel(kv) -> None:
    service = _service(kv, ScriptedAdapter("ok", SendResult(success=True)))
    await _add_channel(kv, "retired-type")
    await _add_channel(kv, "ok")

    record = await service.push("acc-1", PushRequest(title="Hello"))

    assert record.delivery_results[0].status == DeliveryStatus.FAILED
    assert record.delivery_results[0].error == "Unsupported channel type: retired-type"
    assert record.delivery_results[1].status == DeliveryStatus.SUCCESS


async def test_blank_title_rejected(kv) -> None:
    service = _service(kv)
    with pytest.raises(ValidationError) as exc_info:
        await service.push("acc-1", PushRequest(title="   "))
    assert exc_info.value.error_code == ErrorCodes.MISSING_TITLE
