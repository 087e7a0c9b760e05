"""
Auth Service

SendKey authentication, key regeneration and per-account rate limiting.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from ..errors import AuthError, ErrorCodes, NotFoundError
from ..models.account import Account, RateWindow
from ..storage.account_storage import AccountStorage
from ..utils import (
    RateLimitResult,
    check_rate_limit,
    generate_send_key,
    is_valid_send_key,
    isoformat,
    utcnow,
)

logger = logging.getLogger("pusher.services.auth")


def _key_hint(send_key: str) -> str:
    """First characters of a key, safe for logs"""
    return f"{send_key[:4]}..." if send_key else "<empty>"


class AuthService:
    """
    Account authentication and quota.

    Rate-limit state is read, decided on and written back without a
    lock: two concurrent requests of one account can both be admitted
    when each reads the window before the other writes it.
    """

    def __init__(self, account_storage: AccountStorage, window_seconds: int = 60):
        self.account_storage = account_storage
        self.window_seconds = window_seconds

    async def validate(self, send_key: Optional[str]) -> Account:
        """
        Resolve a SendKey to its account.

        Raises:
            AuthError: key missing, malformed, unknown or retired
        """
        if not is_valid_send_key(send_key):
            logger.info(f"Auth failed: malformed key {_key_hint(send_key or '')}")
            raise AuthError()

        account_id = await self.account_storage.get_account_id_by_send_key(send_key)
        if not account_id:
            logger.info(f"Auth failed: unknown key {_key_hint(send_key)}")
            raise AuthError()

        account = await self.account_storage.get_by_id(account_id)
        # A stale index entry must not authenticate a regenerated account
        if not account or account.send_key != send_key:
            logger.info(f"Auth failed: retired key {_key_hint(send_key)}")
            raise AuthError()

        return account

    async def get_account(self, account_id: str) -> Optional[Account]:
        return await self.account_storage.get_by_id(account_id)

    async def create_account(self) -> Account:
        """Create an account with a fresh SendKey"""
        account = Account(rate_limit=RateWindow(
            reset_at=isoformat(utcnow() + timedelta(seconds=self.window_seconds))
        ))
        await self.account_storage.create(account)
        await self.account_storage.index_send_key(account.send_key, account.id)
        logger.info(f"Account created: {account.id}")
        return account

    async def regenerate(self, account_id: str) -> str:
        """
        Replace an account's SendKey.

        The account document is written first, so the old key stops
        validating before the new index entry exists.

        Raises:
            NotFoundError: unknown account
        """
        account = await self.account_storage.get_by_id(account_id)
        if not account:
            raise NotFoundError("Account not found", error_code=ErrorCodes.ACCOUNT_NOT_FOUND)

        old_key = account.send_key
        account.send_key = generate_send_key()

        await self.account_storage.save(account)
        await self.account_storage.index_send_key(account.send_key, account.id)
        await self.account_storage.unindex_send_key(old_key)

        logger.info(f"SendKey regenerated for account {account.id}")
        return account.send_key

    async def check_and_consume(
        self, account: Account, limit: int, current: Optional[datetime] = None
    ) -> RateLimitResult:
        """
        Check the account's window and, when allowed, record the request.

        The new count is persisted before returning; a denied request
        leaves the stored window untouched.
        """
        window = account.rate_limit
        result = check_rate_limit(
            window.count, window.reset_at, limit,
            window_seconds=self.window_seconds, current=current,
        )

        if not result.allowed:
            logger.info(f"Rate limit exceeded for account {account.id} until {result.reset_at}")
            return result

        new_window = RateWindow(count=limit - result.remaining, reset_at=result.reset_at)
        await self.account_storage.update_rate_limit(account.id, new_window)
        account.rate_limit = new_window
        return result
