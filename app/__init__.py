"""CRM workflow automation service."""
