"""Upstream client, retry/cache plumbing and the aggregation service."""
