"""Provider directory search: suggestions, lookups and search orchestration."""
