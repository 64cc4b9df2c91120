"""LogicalVolume types, legacy-aware client wrappers, access logging and configuration for an LVM-backed CSI plugin."""

__version__ = "0.1.0"

__all__ = ["access_log", "api", "client", "config", "constants"]