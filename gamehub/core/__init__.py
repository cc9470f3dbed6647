"""Core session primitives (lifecycle events and the event log format).

Kept free of FastAPI concerns so it can be reused by API routes, the tick loop, and tests.
"""
