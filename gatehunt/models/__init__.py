# Model package init
from .gate import ActiveGate  # noqa: F401 re-export
from .models import CurrencyTransaction, Hunter, InventoryItem, Item, User  # noqa: F401 re-export

__all__ = [
    "ActiveGate",
    "CurrencyTransaction",
    "Hunter",
    "InventoryItem",
    "Item",
    "User",
]
