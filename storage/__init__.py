"""Job record storage."""
