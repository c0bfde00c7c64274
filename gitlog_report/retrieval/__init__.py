"""GitHub REST lookups for organizations and their repositories."""
