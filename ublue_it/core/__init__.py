"""Core domain: models, services, workflow engine, use cases."""
