"""TenantGuard - permission resolution for multi-tenant business applications."""

__version__ = "0.1.0"
