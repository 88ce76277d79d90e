#!/usr/bin/env python3
"""
BASEBOT - Credential Store

Get-or-create for per-user wallets. Exports are encrypted with the
process key before they are written, and decrypted only to import.

Two concurrent calls for a brand-new user may both create a wallet; the
later write replaces the earlier one. Set serialize_wallet_creation to
hold a per-user lock around the whole sequence instead.
"""

import json
import sqlite3

from basebot.config import BotConfig
from basebot.core.crypto import SecretCodec
from basebot.core.locks import KeyedLocks
from basebot.core.wallet import CdpWalletGateway, WalletAddress, WalletHandle
from basebot.data.database import CredentialDatabase, CredentialRecord, Failed, Found, LookupResult
from basebot.exceptions import CredentialCorruptionError, DecryptionError, StoreUnavailableError
from basebot.logger import BotLogger

STORE_ATTEMPTS = 2  # First try plus one retry


class CredentialStore:
    """Durable mapping from chat user to encrypted wallet export."""

    def __init__(
        self,
        config: BotConfig,
        database: CredentialDatabase,
        codec: SecretCodec,
        gateway: CdpWalletGateway,
        logger: BotLogger,
    ):
        self.config = config
        self.database = database
        self.codec = codec
        self.gateway = gateway
        self.logger = logger
        self._creation_locks = KeyedLocks() if config.serialize_wallet_creation else None

    async def get_or_create(self, user_id) -> WalletAddress:
        """
        Load the user's wallet, creating and persisting one on first use.

        Raises:
            CredentialCorruptionError: a record exists but cannot be opened
            StoreUnavailableError: the database failed twice in a row
            ProviderError: wallet creation or import failed at the provider
        """
        if self._creation_locks is None:
            return await self._get_or_create(str(user_id))
        async with self._creation_locks(str(user_id)):
            return await self._get_or_create(str(user_id))

    async def _get_or_create(self, owner_id: str) -> WalletAddress:
        result = self._lookup(owner_id)

        if isinstance(result, Found):
            wallet = await self._open(result.record)
            address = wallet.default_address()
            self.logger.wallet_loaded(owner_id, address.address_id)
            return address

        # NotFound: a user we have never seen
        wallet = await self.gateway.create_wallet(self.config.network_id)
        plaintext = json.dumps(wallet.export()).encode("utf-8")
        nonce, ciphertext = self.codec.encrypt(plaintext)
        self._save(CredentialRecord.seal(owner_id, nonce, ciphertext))

        address = wallet.default_address()
        self.logger.wallet_created(owner_id, address.address_id)
        return address

    def _lookup(self, owner_id: str) -> LookupResult:
        for attempt in range(1, STORE_ATTEMPTS + 1):
            result = self.database.lookup(owner_id)
            if not isinstance(result, Failed):
                return result
            self.logger.warning(
                f"Credential lookup failed for user {owner_id} "
                f"(attempt {attempt}/{STORE_ATTEMPTS}): {result.error}"
            )
        raise StoreUnavailableError("Credential store unavailable") from result.error

    def _save(self, record: CredentialRecord):
        for attempt in range(1, STORE_ATTEMPTS + 1):
            try:
                self.database.save(record)
                return
            except sqlite3.Error as e:
                last_error = e
                self.logger.warning(
                    f"Credential save failed for user {record.owner_id} "
                    f"(attempt {attempt}/{STORE_ATTEMPTS}): {e}"
                )
        raise StoreUnavailableError("Credential store unavailable") from last_error

    async def _open(self, record: CredentialRecord) -> WalletHandle:
        """Decrypt and import. Never falls back to a fresh wallet: that would orphan funds."""
        try:
            plaintext = self.codec.decrypt(record.nonce, record.ciphertext)
            export = json.loads(plaintext.decode("utf-8"))
            return await self.gateway.import_wallet(export)
        except (DecryptionError, ValueError) as e:
            raise CredentialCorruptionError(
                f"Stored wallet for user {record.owner_id} cannot be opened"
            ) from e
