"""Host-app networking.

Goal: the verification engine stays transport-agnostic. Only this layer
creates the shared HTTP client and knows the sample backend's endpoints.
"""

from .backend_client import Enrollment, SampleBackendClient
from .transport import create_http_client, get_http_request_stats

__all__ = ["Enrollment", "SampleBackendClient", "create_http_client", "get_http_request_stats"]
