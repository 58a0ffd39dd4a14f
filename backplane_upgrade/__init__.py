"""Self-upgrade command for the backplane plugin and a managed-script test-job request builder."""

__version__ = "0.1.0"
__all__ = ["__version__"]