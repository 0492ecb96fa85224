from shopapi.repositories.catalog import CatalogStore
from shopapi.repositories.ledger import OrderLedger

__all__ = ["CatalogStore", "OrderLedger"]
