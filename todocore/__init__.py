"""
todocore - todo record service with a pluggable persistence gateway.
"""
__version__ = "0.1.0"
