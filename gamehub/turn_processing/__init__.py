"""Turn/action processing helpers.

This package centralizes validation so session actions coming from HTTP, the
tick loop and tests flow through the same pipeline and log consistently.
"""
