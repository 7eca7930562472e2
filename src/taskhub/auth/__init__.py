"""Authentication and authorization.

Users log in with email/password and receive a signed, short-lived
access token. Every protected request presents it as a Bearer token
and resolves to a Principal, which all downstream code uses to scope
queries to the owner's projects and tasks.
"""
