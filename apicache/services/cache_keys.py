# services/cache_keys.py
import json
from typing import Any, Dict, Optional

# TTLs per resource kind
REFERENCE_DATA_TTL_MS = 30 * 60 * 1000   # categories, payment methods
TRANSACTIONAL_TTL_MS = 2 * 60 * 1000     # bills, income, expenses

# Resource groups, used as invalidation patterns after writes
BILLS = "bills"
CATEGORIES = "categories"
PAYMENT_METHODS = "payment_methods"
INCOME = "income"
EXPENSES = "expenses"
BUDGETS = "budgets"
LOANS = "loans"
GOALS = "goals"
RECURRING = "recurring"


def cache_key(resource: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Key for a read of ``resource`` with ``params``; stable across dict ordering."""
    if not resource:
        raise ValueError("resource must be a non-empty string")
    serialized = json.dumps(params or {}, sort_keys=True, separators=(",", ":"), default=str)
    return f"{resource}_{serialized}"


def bills_all_key() -> str:
    return cache_key(f"{BILLS}_all")

def bill_detail_key(bill_id: Any) -> str:
    return f"{BILLS}_detail_{bill_id}"

def categories_all_key() -> str:
    return cache_key(f"{CATEGORIES}_all")

def categories_by_type_key(category_type: str) -> str:
    return cache_key(f"{CATEGORIES}_by_type", {"type": category_type})

def payment_methods_all_key() -> str:
    return cache_key(f"{PAYMENT_METHODS}_all")

def income_all_key(params: Optional[Dict[str, Any]] = None) -> str:
    return cache_key(f"{INCOME}_all", params)

def expenses_all_key(params: Optional[Dict[str, Any]] = None) -> str:
    return cache_key(f"{EXPENSES}_all", params)
