"""Taskforge accounts: local users, password sessions and OAuth login."""
