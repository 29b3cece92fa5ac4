"""Point-of-sale backend for a bakery: catalog, checkout, receipts and sales dashboard."""
