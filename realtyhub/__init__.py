"""Multi-tenant blog and real-estate listings service."""

__version__ = "1.0.0"
