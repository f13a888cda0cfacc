"""Schema resolution, projection, payloads, filters and task queries."""
