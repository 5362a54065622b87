"""Core modules of swarmpy."""
