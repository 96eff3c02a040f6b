"""Push-factor verification engine.

Only this package knows about the verification REST layout and factor
storage; host apps talk to it through VerifyEngine.
"""

from .engine import VerifyEngine, VerifyEngineBuilder
from .errors import ErrorCode, InitializationError, NetworkError, VerifyError
from .models import AppContext, Factor, FactorStatus, FactorType, PushFactorPayload, UpdatePushFactorPayload
from .networking import BasicAuthorization, HttpxNetworkProvider, NetworkProvider

__all__ = [
    "AppContext",
    "BasicAuthorization",
    "ErrorCode",
    "Factor",
    "FactorStatus",
    "FactorType",
    "HttpxNetworkProvider",
    "InitializationError",
    "NetworkError",
    "NetworkProvider",
    "PushFactorPayload",
    "UpdatePushFactorPayload",
    "VerifyEngine",
    "VerifyEngineBuilder",
    "VerifyError",
]
