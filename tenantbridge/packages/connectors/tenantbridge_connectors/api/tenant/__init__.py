from .config import TenantConnectionConfig, build_credential_provider
from .factory import ResolvedConnectionRequest, TenantAwareConnectionFactory

__all__ = [
    "ResolvedConnectionRequest",
    "TenantAwareConnectionFactory",
    "TenantConnectionConfig",
    "build_credential_provider",
]
