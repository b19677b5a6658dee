"""Core domain - roles, users, permissions and tokens."""
