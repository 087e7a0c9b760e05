"""Tests for the KV stores and the entity storages on top of them."""

from src.pusher.models.account import Account, RateWindow
from src.pusher.storage import memory as memory_module
from src.pusher.storage.account_storage import AccountStorage
from src.pusher.storage.memory import MemoryKVStore
from src.pusher.storage.postgres import _like_prefix
from src.pusher.storage.token_storage import EXPIRY_MARGIN_SECONDS, TokenStorage

# -- MemoryKVStore -----------------------------------------------------------


async def test_list_keeps_insertion_order_on_overwrite() -> None:
    kv = MemoryKVStore()
    await kv.put("channel:a:1", b"1")
    await kv.put("channel:a:2", b"2")
    await kv.put("channel:b:1", b"3")
    await kv.put("channel:a:1", b"updated")

    assert await kv.list("channel:a:") == ["channel:a:1", "channel:a:2"]
    assert await kv.get("channel:a:1") == b"updated"


async def test_ttl_expires_lazily(monkeypatch) -> None:
    clock = [1000.0]
    monkeypatch.setattr(memory_module.time, "time", lambda: clock[0])
    kv = MemoryKVStore()
    await kv.put("token:x", b"t", ttl=10)

    assert await kv.get("token:x") == b"t"
    clock[0] += 11
    assert await kv.get("token:x") is None
    assert await kv.list("token:") == []


async def test_delete_missing_key_is_ignored() -> None:
    kv = MemoryKVStore()
    await kv.delete("nope")
    assert await kv.get("nope") is None


def test_like_prefix_is_escaped() -> None:
    assert _like_prefix("channel:a_b%") == "channel:a\\_b\\%%"


# -- AccountStorage ----------------------------------------------------------


async def test_save_does_not_touch_rate_window() -> None:
    storage = AccountStorage(MemoryKVStore())
    account = Account()
    await storage.create(account)

    window = RateWindow(count=5, reset_at=account.rate_limit.reset_at)
    await storage.update_rate_limit(account.id, window)
    account.send_key = "x" * 32
    await storage.save(account)

    loaded = await storage.get_by_id(account.id)
    assert loaded.send_key == "x" * 32
    assert loaded.rate_limit.count == 5


# -- TokenStorage ------------------------------------------------------------


async def test_token_cached_with_margin() -> None:
    kv = MemoryKVStore()
    tokens = TokenStorage(kv)
    await tokens.put_token("wechat-template:app", "tok", 7200)

    assert await tokens.get_token("wechat-template:app") == "tok"
    data = await tokens.get_json("token:wechat-template:app")
    assert data["accessToken"] == "tok"

    await tokens.invalidate("wechat-template:app")
    assert await tokens.get_token("wechat-template:app") is None


async def test_short_lived_token_is_not_served_after_margin(monkeypatch) -> None:
    clock = [1000.0]
    monkeypatch.setattr(memory_module.time, "time", lambda: clock[0])
    tokens = TokenStorage(MemoryKVStore())
    await tokens.put_token("k", "tok", EXPIRY_MARGIN_SECONDS + 60)

    clock[0] += 59
    assert await tokens.get_token("k") == "tok"
    clock[0] += 2
    assert await tokens.get_token("k") is None
