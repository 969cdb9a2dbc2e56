"""
HTTP layer: request dependencies (identity, gates) and route modules.
"""
