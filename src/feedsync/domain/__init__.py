"""Feed ingestion and catalog reconciliation domain."""
