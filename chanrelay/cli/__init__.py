"""Command-line HTTP clients for the relay API."""
