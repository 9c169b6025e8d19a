"""Exception classes for bibfilter."""


class BibfilterError(Exception):
    """Base exception for bibfilter errors."""

    pass


class ParseFailure(BibfilterError):
    """Raised when non-empty input contains no BibTeX entries."""

    def __init__(self, length: int):
        """Initialize with the length of the rejected input."""
        self.length = length
        super().__init__(
            f"No BibTeX entries found in {length} characters of input"
        )


class ConfigError(BibfilterError, ValueError):
    """Raised when a saved query configuration cannot be loaded."""

    def __init__(self, source: str, message: str):
        """Initialize with the config source and the decoding problem."""
        self.source = source
        super().__init__(f"Invalid query configuration in {source}: {message}")
