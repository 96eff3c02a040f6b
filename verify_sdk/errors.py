from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    NETWORK_ERROR = (68001, "Exception while calling the API")
    MAPPER_ERROR = (68002, "Exception while mapping an entity")
    STORAGE_ERROR = (68003, "Exception while storing/loading an entity")
    INPUT_ERROR = (68004, "Exception while processing input")
    INITIALIZATION_ERROR = (68006, "Exception while initializing")

    @property
    def value_code(self) -> int:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]


@dataclass(frozen=True)
class ApiError:
    """Error body returned by the REST API (`code`, `message`, `more_info`)."""

    code: Optional[int]
    message: str
    more_info: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> Optional["ApiError"]:
        if not isinstance(data, dict) or "message" not in data:
            return None
        code = data.get("code")
        try:
            code = int(code) if code is not None else None
        except (TypeError, ValueError):
            code = None
        return cls(code=code, message=str(data.get("message")), more_info=data.get("more_info"))


@dataclass(frozen=True)
class FailureResponse:
    status_code: int
    body: str
    headers: Dict[str, str]
    api_error: Optional[ApiError] = None


class NetworkError(Exception):
    """Raised by the network provider for transport failures and HTTP status >= 400."""

    def __init__(
        self,
        message: str,
        *,
        failure_response: Optional[FailureResponse] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.failure_response = failure_response
        self.cause = cause

    @property
    def status_code(self) -> Optional[int]:
        return self.failure_response.status_code if self.failure_response else None


class VerifyError(Exception):
    """Error surfaced by the verification engine, tagged with an ErrorCode."""

    def __init__(self, cause: BaseException, code: ErrorCode) -> None:
        super().__init__(f"{code.message} ({code.value_code}): {cause}")
        self.cause = cause
        self.code = code
        self.__cause__ = cause


class InitializationError(VerifyError):
    """Engine (or provider) construction failed; nothing was built."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(cause, ErrorCode.INITIALIZATION_ERROR)
