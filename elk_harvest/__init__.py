"""Parse CPW harvest CSV reports and serve them read-only over HTTP."""

__version__ = "0.1.0"
