"""Provider implementations of the core ports."""
