"""xypcli -- scaffolding and dependency installation for XyPriss projects."""

__version__ = "1.0.0"
