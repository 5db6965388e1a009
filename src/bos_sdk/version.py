"""Version information for the BOS Python SDK"""

__version__ = "0.1.0"
