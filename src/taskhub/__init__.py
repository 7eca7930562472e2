"""taskhub — multi-tenant task tracking backend.

Users own projects, projects own tasks, and every read or write is
scoped to the authenticated owner.
"""

__version__ = "0.1.0"
