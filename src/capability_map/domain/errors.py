"""Domain and application errors."""


class CapabilityMapError(Exception):
    """Base for capability-map errors."""
    pass


class ExtractionError(CapabilityMapError):
    """The AI collaborator produced no usable capabilities (error, timeout or bad output)."""
    pass


class MapGenerationError(CapabilityMapError):
    """Unexpected failure inside a pure pipeline stage; no partial map is returned."""
    pass


class TaskSourceError(CapabilityMapError):
    """Tasks could not be loaded from the configured source."""
    pass
