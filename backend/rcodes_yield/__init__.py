"""R-Code residential yield and scenario optimizer."""

__version__ = "0.1.0"
