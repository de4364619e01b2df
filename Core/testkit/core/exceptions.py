class TestkitError(RuntimeError):
    """Base class for fixture toolkit errors."""


class ConfigurationError(TestkitError):
    """Raised when a required provider, policy or setting is missing."""


class CircularDependencyError(ConfigurationError):
    """Raised when fixture tables depend on each other in a loop."""

    def __init__(self, chain: list[str]) -> None:
        self.chain = list(chain)
        origin = self.chain[0] if self.chain else "?"
        steps = " -> ".join(self.chain + [origin])
        super().__init__(f"Circular table dependency: {steps}")


class TransportError(TestkitError):
    """Raised when the remote automation endpoint cannot be reached or fails."""


class InvalidStateError(TestkitError):
    """Raised when an operation does not fit the current resource state."""


class InvalidArgumentError(TestkitError, ValueError):
    """Raised when a caller supplies a malformed value."""
