"""Services for external tooling."""
