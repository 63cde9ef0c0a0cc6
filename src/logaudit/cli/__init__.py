"""log-audit command-line interface."""
