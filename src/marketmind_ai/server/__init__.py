"""Server package."""
