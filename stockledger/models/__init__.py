from stockledger.models.inventory import CountLine, CountSession, Movement, StockLevel, Transfer
from stockledger.models.product import Product

__all__ = [
    "CountLine",
    "CountSession",
    "Movement",
    "Product",
    "StockLevel",
    "Transfer",
]
