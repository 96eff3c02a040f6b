from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class AppContext:
    """Host application context handed to the engine builder.

    `package_name` namespaces local storage; `storage_dir` enables persistence
    (in-memory only when None).
    """

    package_name: str
    storage_dir: Optional[Path] = None


class FactorType(str, Enum):
    PUSH = "push"


class FactorStatus(str, Enum):
    UNVERIFIED = "unverified"
    VERIFIED = "verified"


class Factor(BaseModel):
    """A factor as returned by the API and kept in local storage."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    sid: str
    friendly_name: str = ""
    account_sid: str = ""
    service_sid: str
    identity: str
    type: FactorType = Field(default=FactorType.PUSH, alias="factor_type")
    status: FactorStatus = FactorStatus.UNVERIFIED
    created_at: Optional[datetime] = Field(default=None, alias="date_created")
    config: Dict[str, Any] = Field(default_factory=dict)


@dataclass(frozen=True)
class PushFactorPayload:
    """Everything needed to create a push factor.

    `access_token` is the enrollment token the sample backend hands out;
    an empty `push_token` disables push notifications for the factor.
    """

    friendly_name: str
    service_sid: str
    identity: str
    push_token: Optional[str]
    access_token: str
    metadata: Optional[Dict[str, str]] = None

    @property
    def factor_type(self) -> FactorType:
        return FactorType.PUSH


@dataclass(frozen=True)
class UpdatePushFactorPayload:
    sid: str
    push_token: Optional[str]
