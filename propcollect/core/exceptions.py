"""propcollect custom exceptions."""


class PropCollectError(Exception):
    """Base exception for propcollect errors."""


class ConfigurationError(PropCollectError):
    """Invalid traversal rules, property table or connection settings."""


class TransportError(PropCollectError):
    """The retrieval call to the inventory service failed."""


class MalformedRecordError(PropCollectError):
    """One or more result records carry no object identity."""

    def __init__(self, positions: list[int]) -> None:
        self.positions = positions
        listed = ", ".join(str(p) for p in positions)
        super().__init__(f"Result records without object identity at positions: {listed}")
