"""Infrastructure layer: persistence, HTTP integrations and observability."""
