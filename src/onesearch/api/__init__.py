"""HTTP surface of a OneSearch node."""
