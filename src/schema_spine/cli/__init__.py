"""Command-line interface for schema-spine (``schema-spine``)."""
