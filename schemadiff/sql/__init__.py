"""Schema parsing for SQL DDL."""
