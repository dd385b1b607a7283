"""Personal trading journal with local snapshots and AI trade reviews."""

__version__ = "0.1.0"
