class ConnectorError(RuntimeError):
    """Base error for connector issues."""


class ConnectorConfigurationError(ConnectorError):
    """Raised when a connection factory is constructed with invalid configuration."""


class DriverConnectionError(ConnectorError):
    """Raised when the underlying driver fails to open a connection."""

    def __init__(self, message: str, *, url: str, driver: str) -> None:
        super().__init__(message)
        self.url = url
        self.driver = driver


class ConnectionInvariantError(ConnectorError):
    """Raised when a driver reports success but hands back no usable connection."""

    def __init__(self, message: str, *, url: str, driver: str) -> None:
        super().__init__(message)
        self.url = url
        self.driver = driver


class SecretResolutionError(ConnectorError):
    """Raised when a referenced credential secret cannot be resolved."""
