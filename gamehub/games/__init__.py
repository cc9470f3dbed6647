"""Per-game rule engines.

Each engine is a set of pure functions over an explicit pydantic state model, so
sessions, the tick loop and tests all drive the same code.
"""
