"""HTTP surface of the resilience core."""
