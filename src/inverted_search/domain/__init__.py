"""Domain layer: documents and search results."""
