"""Error kinds shared by the renderers, the edit engine and the session."""


class ConfigurationError(ValueError):
    """Invalid sizes, tile specs or cell coordinates. Raised before any work starts."""


class SurfaceAllocationError(RuntimeError):
    """A raster surface could not be created for the requested dimensions."""


class EmptyResultWarning(UserWarning):
    """A renderer had nothing to draw and returned an explicit empty result."""


__all__ = ["ConfigurationError", "SurfaceAllocationError", "EmptyResultWarning"]
