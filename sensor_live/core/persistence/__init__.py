"""Persistence layer - Store durable y throttling de escrituras."""

from .async_writer import AsyncStoreWriter
from .store import SensorLogStore, StoredReading
from .throttler import PersistenceThrottler

__all__ = ["AsyncStoreWriter", "PersistenceThrottler", "SensorLogStore", "StoredReading"]
