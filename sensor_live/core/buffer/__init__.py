from .sliding_window import SlidingWindowBuffer

__all__ = ["SlidingWindowBuffer"]
