"""firstrun — catalog-driven first-run provisioning for Windows machines."""

__version__ = "0.1.0"
