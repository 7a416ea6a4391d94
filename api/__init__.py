"""
api
===

FastAPI HTTP layer over the leasekeeper services.
"""
