"""HTTP transport for the listing registry."""
