"""Services: advisory database access, git operations, publish workflow."""
