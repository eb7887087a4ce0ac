"""Background jobs of the indexer process."""
