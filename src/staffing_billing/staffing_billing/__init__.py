"""Invoice calculation and merge engine for a security-staffing back office."""
