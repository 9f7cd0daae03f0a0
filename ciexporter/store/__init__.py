"""Stores keeping exporter state and queued tasks in memory or in Redis."""