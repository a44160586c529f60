"""Core building blocks: report types, protocols, errors and logging."""
