"""Domain rules (validation, permission levels, errors) free of HTTP and storage concerns."""
