"""HTTP transport and the request dispatcher."""
