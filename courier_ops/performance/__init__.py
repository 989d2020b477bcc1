# Performance utilities
# One shared shipment feed per session, phase views derived in memory

from .data_loader import FeedLoader

__all__ = ['FeedLoader']
