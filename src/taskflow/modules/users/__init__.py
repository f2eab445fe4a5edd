"""User accounts.

Accounts have no routes of their own; registration and login live in
``taskflow.core.auth.routes``.
"""
