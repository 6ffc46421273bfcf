"""
Constants for sales (transactions) operations.
"""

# Amount fields as stored on sale records
PURCHASE_PRICE_FIELD = "purchasePricePln"  # foreign currency (PLN)
SELLING_PRICE_FIELD = "sellingPriceCzk"
NET_PROFIT_FIELD = "netProfitCzk"

PURCHASE_CURRENCY = "PLN"
LOCAL_CURRENCY = "CZK"

# Sale record fields copied onto a return record
RETURN_SNAPSHOT_FIELDS = [
    "itemName",
    "note",
    "seller",
    "deliveryCity",
    "customerAddress",
    "customerContact",
    "customerPhone2",
]
