"""Job board core: fit scoring, access control and application tracking."""
