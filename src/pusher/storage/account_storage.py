"""
Account Storage

Accounts, their rate windows and the SendKey -> account id index.

The rate window lives under its own key so that rate-limit writes never
rewrite the account document (and with it the SendKey).
"""
import logging
from typing import Optional

from .base import JSONStorage
from ..models.account import Account, RateWindow

logger = logging.getLogger("pusher.storage.account")

ACCOUNT_PREFIX = "account:"
RATE_PREFIX = "rate:"
SENDKEY_PREFIX = "sendkey:"


class AccountStorage(JSONStorage):
    """Storage for Account entities"""

    async def get_by_id(self, account_id: str) -> Optional[Account]:
        data = await self.get_json(f"{ACCOUNT_PREFIX}{account_id}")
        if not data:
            return None
        account = Account.from_dict(data)
        window = await self.get_json(f"{RATE_PREFIX}{account_id}")
        if window:
            account.rate_limit = RateWindow.from_dict(window)
        return account

    async def get_account_id_by_send_key(self, send_key: str) -> Optional[str]:
        return await self.get_text(f"{SENDKEY_PREFIX}{send_key}")

    async def create(self, account: Account) -> Account:
        """Write a new account and its initial rate window"""
        await self.save(account)
        await self.update_rate_limit(account.id, account.rate_limit)
        return account

    async def save(self, account: Account) -> Account:
        """Write the account document only (rate window and SendKey index untouched)"""
        await self.put_json(f"{ACCOUNT_PREFIX}{account.id}", account.to_dict())
        return account

    async def index_send_key(self, send_key: str, account_id: str):
        await self.put_text(f"{SENDKEY_PREFIX}{send_key}", account_id)

    async def unindex_send_key(self, send_key: str):
        await self.kv.delete(f"{SENDKEY_PREFIX}{send_key}")

    async def update_rate_limit(self, account_id: str, window: RateWindow):
        """Overwrite the rate window; last writer wins"""
        await self.put_json(f"{RATE_PREFIX}{account_id}", window.to_dict())
