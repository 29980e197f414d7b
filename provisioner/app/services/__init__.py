"""
Services package for the provisioner.

This package contains the business logic:
- Provisioning: shared Postgres roles/databases and managed RDS instances
- Credentials: connection string rendering
"""

__all__ = []
