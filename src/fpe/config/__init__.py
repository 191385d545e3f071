"""Engine configuration."""

from .settings import Settings, settings  # noqa: F401
