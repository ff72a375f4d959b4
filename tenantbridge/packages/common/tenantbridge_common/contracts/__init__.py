from .connectors import SecretReference
from .identity import ConnectorIdentity

__all__ = ["ConnectorIdentity", "SecretReference"]
