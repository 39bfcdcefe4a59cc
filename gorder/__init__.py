"""Order, stock and payment building blocks for a small order-processing system."""

__version__ = "0.1.0"