"""npm version range parsing and matching."""
