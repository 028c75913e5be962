"""Protocol Forum: threaded discussion API for protocols."""

__version__ = "0.1.0"
