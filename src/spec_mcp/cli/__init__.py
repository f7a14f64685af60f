"""Command-line interface for spec-mcp.

Every command prints a response-v2 JSON envelope on stdout; failures exit
with status 1.
"""
