"""Text utilities for DataBot."""
