"""Tests for push history: ordering, cursor paging and ownership."""

from datetime import timedelta

import pytest

from src.pusher.models.message import DeliveryResult, DeliveryStatus, PushRecord
from src.pusher.utils import utcnow


async def _seed(history, count: int, account_id: str = "acc-1"):
    base = utcnow()
    records = []
    for i in range(count):
        record = PushRecord(
            account_id=account_id,
            title=f"Message {i}",
            created_at=base + timedelta(seconds=i),
        )
        records.append(await history.append(record))
    return records


async def test_pages_of_ten_over_twenty_five(engine) -> None:
    history = engine.history_service
    records = await _seed(history, 25)
    newest_first = [r.id for r in reversed(records)]

    first = await history.list("acc-1", limit=10)
    second = await history.list("acc-1", limit=10, cursor=first.cursor)
    third = await history.list("acc-1", limit=10, cursor=second.cursor)

    assert [r.id for r in first.items] == newest_first[:10]
    assert [r.id for r in second.items] == newest_first[10:20]
    assert [r.id for r in third.items] == newest_first[20:]
    assert first.has_more and second.has_more
    assert not third.has_more
    assert third.cursor is None


async def test_limit_is_clamped(engine) -> None:
    history = engine.history_service
    await _seed(history, 25)

    assert len((await history.list("acc-1")).items) == 20
    assert len((await history.list("acc-1", limit=0)).items) == 20
    assert len((await history.list("acc-1", limit=1000)).items) == 25


async def test_unknown_cursor_starts_from_newest(engine) -> None:
    history = engine.history_service
    records = await _seed(history, 3)

    page = await history.list("acc-1", cursor="does-not-exist")

    assert page.items[0].id == records[-1].id


async def test_equal_timestamps_keep_insertion_order(engine) -> None:
    history = engine.history_service
    created_at = utcnow()
    first = await history.append(PushRecord(account_id="acc-1", title="a", created_at=created_at))
    second = await history.append(PushRecord(account_id="acc-1", title="b", created_at=created_at))

    page = await history.list("acc-1")

    assert [r.id for r in page.items] == [first.id, second.id]


async def test_history_is_account_scoped(engine) -> None:
    history = engine.history_service
    mine = await _seed(history, 2)
    theirs = await _seed(history, 3, account_id="acc-2")

    page = await history.list("acc-1")

    assert {r.id for r in page.items} == {r.id for r in mine}
    assert await history.get("acc-1", theirs[0].id) is None
    assert (await history.get("acc-2", theirs[0].id)).title == "Message 0"


async def test_pending_results_are_rejected(engine) -> None:
    record = PushRecord(
        account_id="acc-1",
        title="Hello",
        delivery_results=[DeliveryResult(channel_id="c1", channel_type="dingtalk")],
    )
    with pytest.raises(ValueError):
        await engine.history_service.append(record)


async def test_page_to_dict(engine) -> None:
    history = engine.history_service
    record = PushRecord(
        account_id="acc-1",
        title="Hello",
        content="World",
        delivery_results=[
            DeliveryResult(
                channel_id="c1",
                channel_type="dingtalk",
                status=DeliveryStatus.FAILED,
                error="boom",
            )
        ],
    )
    await history.append(record)

    data = (await history.list("acc-1")).to_dict()

    assert data["hasMore"] is False
    assert "cursor" not in data
    message = data["messages"][0]
    assert message["title"] == "Hello"
    assert message["content"] == "World"
    assert message["deliveryResults"] == [
        {"channelId": "c1", "channelType": "dingtalk", "status": "failed", "error": "boom"}
    ]


async def test_delete(engine) -> None:
    history = engine.history_service
    record = (await _seed(history, 1))[0]

    assert not await history.delete("acc-2", record.id)
    assert await history.delete("acc-1", record.id)
    assert await history.get("acc-1", record.id) is None
    assert (await history.list("acc-1")).items == []
