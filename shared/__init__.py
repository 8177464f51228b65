"""
Shared utilities for the registry dashboard.

This package contains functionality used by the dashboard engine and its launcher:
- registry_client: HTTP client for the service registry REST API
- errors: Registry error taxonomy and failure classification
- logging_config: Consistent logging setup
"""
