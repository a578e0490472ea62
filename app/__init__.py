"""Deploy Relay - self-service cloud deployments with live workflow logs."""

__version__ = "0.1.0"
