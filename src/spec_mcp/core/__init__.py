"""Core spec storage, validation and workflow logic for spec-mcp."""
