"""External data sources: competitor snapshots and Google Trends."""
