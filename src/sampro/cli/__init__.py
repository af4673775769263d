"""SAM Pro command-line interface."""
