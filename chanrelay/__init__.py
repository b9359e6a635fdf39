"""chanrelay -- HTTP relay that dispatches text and media to messaging channels."""

__version__ = "1.0.0"
