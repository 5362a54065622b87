"""swarmpy command line interface."""
