"""HTTP API for learnpath."""
