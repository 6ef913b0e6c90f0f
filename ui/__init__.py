"""User interfaces for the sand table."""
