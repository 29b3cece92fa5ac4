"""
FastAPI routers grouped by domain (products, transactions, dashboard, backup, receipts).

Each module exposes an APIRouter included by kasir.app.
"""
