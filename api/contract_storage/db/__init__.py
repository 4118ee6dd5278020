"""Database access for the Contract Storage API."""
