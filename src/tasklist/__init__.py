"""Tasklist — multi-user task-list API.

Users sign up, log in for a signed token, and manage their own tasks.
Every task query is scoped to the identity resolved from that token.
"""

__version__ = "0.1.0"
