"""Error taxonomy shared by services and routers."""


class KasirError(Exception):
    """Base class for POS errors surfaced to callers."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ConfigurationAbsent(KasirError):
    """Remote backend is not configured. A routing signal, not a failure."""


class RemoteOperationFailed(KasirError):
    """The remote backend rejected or failed a query."""


class ValidationFailed(KasirError):
    """User-correctable input problem (empty cart, insufficient cash, bad price)."""


class NotFound(KasirError):
    """Requested product or transaction does not exist."""
