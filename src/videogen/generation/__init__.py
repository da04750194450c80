"""Submit, poll and deliver exactly one result per generation request."""
