"""
Use cases for the Kasir backend.

Routers call these services (persistence facade, checkout, backup, receipts)
instead of touching the storage adapters directly.
"""
