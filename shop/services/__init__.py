"""Service layer: runs a repository strategy and shapes its result for the API."""
