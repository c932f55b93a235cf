from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MarketType(str, Enum):
    MARKETPLACE = "MARKETPLACE"
    STOREFRONT = "STOREFRONT"
    STOREFRONT_ADMIN = "STOREFRONT_ADMIN"


# --- Profile & Settings ---

class Profile(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    created_at: datetime = Field(default_factory=_utcnow)

class Setting(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    profile_id: UUID
    key: str
    value: str
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

# --- Wallets & Markets ---

class Wallet(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    profile_id: UUID
    name: str  # wallet identifier on the node, e.g. market.dat
    created_at: datetime = Field(default_factory=_utcnow)

class Market(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    wallet_id: UUID
    profile_id: UUID
    name: str
    type: MarketType = MarketType.MARKETPLACE
    receive_key: str
    receive_address: str
    publish_key: str | None = None
    publish_address: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

class MarketCreateRequest(BaseModel):
    """Desired state of a market row; also used as the full update payload."""

    model_config = ConfigDict(frozen=True)

    wallet_id: UUID
    profile_id: UUID
    name: str
    type: MarketType = MarketType.MARKETPLACE
    receive_key: str
    receive_address: str
    publish_key: str | None = None
    publish_address: str | None = None

# --- Secure messaging ---

class SmsgKey(BaseModel):
    """A key known to the secure-messaging subsystem (smsglocalkeys entry)."""

    address: str
    public_key: str
    receive: bool = True
    anon: bool = True
    label: str = ""
