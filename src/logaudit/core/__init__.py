"""Core audit pipeline: discovery, filtering, extraction and run coordination."""
