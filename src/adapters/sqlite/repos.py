"""
SQLite repositories for profiles, settings, wallets and markets.

One connection per call; writes commit before the connection closes.
"""

import sqlite3
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from src.domain.entities import (
    Market,
    MarketCreateRequest,
    MarketType,
    Profile,
    Setting,
    Wallet,
)


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


class SQLiteRepoBase:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn


class SQLiteProfileRepo(SQLiteRepoBase):
    def get_by_id(self, profile_id: UUID) -> Profile | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM profiles WHERE id = ?", (str(profile_id),)
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def get_by_name(self, name: str) -> Profile | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM profiles WHERE name = ?", (name,)).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def save(self, profile: Profile) -> Profile:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO profiles (id, name, created_at) VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET name=excluded.name
                """,
                (str(profile.id), profile.name, profile.created_at.isoformat()),
            )
            conn.commit()
            return profile
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Profile:
        return Profile(
            id=UUID(row["id"]),
            name=row["name"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteSettingRepo(SQLiteRepoBase):
    def find_all_by_profile_id(self, profile_id: UUID) -> list[Setting]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM settings WHERE profile_id = ? ORDER BY key",
                (str(profile_id),),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def save(self, setting: Setting) -> Setting:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO settings (id, profile_id, key, value, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(profile_id, key) DO UPDATE SET
                    value=excluded.value,
                    updated_at=excluded.updated_at
                """,
                (
                    str(setting.id),
                    str(setting.profile_id),
                    setting.key,
                    setting.value,
                    setting.created_at.isoformat(),
                    setting.updated_at.isoformat(),
                ),
            )
            conn.commit()
            row = conn.execute(
                "SELECT * FROM settings WHERE profile_id = ? AND key = ?",
                (str(setting.profile_id), setting.key),
            ).fetchone()
            return self._map_row(row)
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Setting:
        return Setting(
            id=UUID(row["id"]),
            profile_id=UUID(row["profile_id"]),
            key=row["key"],
            value=row["value"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


class SQLiteWalletRepo(SQLiteRepoBase):
    def find_one(self, wallet_id: UUID) -> Wallet | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM wallets WHERE id = ?", (str(wallet_id),)
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def find_by_profile_and_name(self, profile_id: UUID, name: str) -> Wallet | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM wallets WHERE profile_id = ? AND name = ?",
                (str(profile_id), name),
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def create(self, wallet: Wallet) -> Wallet:
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO wallets (id, profile_id, name, created_at) VALUES (?, ?, ?, ?)",
                (
                    str(wallet.id),
                    str(wallet.profile_id),
                    wallet.name,
                    wallet.created_at.isoformat(),
                ),
            )
            conn.commit()
            return wallet
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Wallet:
        return Wallet(
            id=UUID(row["id"]),
            profile_id=UUID(row["profile_id"]),
            name=row["name"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteMarketRepo(SQLiteRepoBase):
    def find_one(self, market_id: UUID) -> Market | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM markets WHERE id = ?", (str(market_id),)
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def find_by_profile_and_address(
        self, profile_id: UUID, receive_address: str
    ) -> Market | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM markets WHERE profile_id = ? AND receive_address = ?",
                (str(profile_id), receive_address),
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def list_by_profile(self, profile_id: UUID) -> list[Market]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM markets WHERE profile_id = ? ORDER BY created_at, rowid",
                (str(profile_id),),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def create(self, request: MarketCreateRequest) -> Market:
        now = datetime.now(UTC)
        market = Market(id=uuid4(), created_at=now, updated_at=now, **request.model_dump())
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO markets (
                    id, wallet_id, profile_id, name, type,
                    receive_key, receive_address, publish_key, publish_address,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(market.id),
                    str(market.wallet_id),
                    str(market.profile_id),
                    market.name,
                    market.type.value,
                    market.receive_key,
                    market.receive_address,
                    market.publish_key,
                    market.publish_address,
                    market.created_at.isoformat(),
                    market.updated_at.isoformat(),
                ),
            )
            conn.commit()
            return market
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def update(self, market_id: UUID, request: MarketCreateRequest) -> Market:
        conn = self._get_conn()
        try:
            # Every column is rewritten, even when unchanged
            cursor = conn.execute(
                """
                UPDATE markets SET
                    wallet_id = ?, profile_id = ?, name = ?, type = ?,
                    receive_key = ?, receive_address = ?,
                    publish_key = ?, publish_address = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    str(request.wallet_id),
                    str(request.profile_id),
                    request.name,
                    request.type.value,
                    request.receive_key,
                    request.receive_address,
                    request.publish_key,
                    request.publish_address,
                    datetime.now(UTC).isoformat(),
                    str(market_id),
                ),
            )
            if cursor.rowcount == 0:
                raise LookupError(f"Market {market_id} not found")
            conn.commit()
            row = conn.execute(
                "SELECT * FROM markets WHERE id = ?", (str(market_id),)
            ).fetchone()
            return self._map_row(row)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Market:
        return Market(
            id=UUID(row["id"]),
            wallet_id=UUID(row["wallet_id"]),
            profile_id=UUID(row["profile_id"]),
            name=row["name"],
            type=MarketType(row["type"]),
            receive_key=row["receive_key"],
            receive_address=row["receive_address"],
            publish_key=row["publish_key"],
            publish_address=row["publish_address"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
