"""Entities and pure business rules (cart, totals, change, history filters)."""
