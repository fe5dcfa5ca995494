"""Mock transaction store speaking the PostgREST query dialect the StoreClient uses

Run with: uvicorn mock.transaction_store.main:app --port 8001

Personas are generated relative to today, every transaction on the 1st so the
current month is always complete:
- user_steady: flat salary, flat spending
- user_growing: flat salary, restaurant spend climbing every month
- user_empty: no transactions at all
"""

from datetime import date
from typing import Dict, List

from fastapi import FastAPI, HTTPException, Request

app = FastAPI(title="Mock Transaction Store", version="1.0.0")

CATEGORIES = {
    "cat_salary": ("Salary", "income"),
    "cat_groceries": ("Groceries", "expense"),
    "cat_restaurants": ("Restaurants", "expense"),
    "cat_rent": ("Rent", "expense"),
}
PERSONAS = ("user_steady", "user_growing", "user_empty")
HISTORY_MONTHS = 14


def _month_start(today: date, offset: int) -> date:
    total = today.year * 12 + today.month - 1 - offset
    return date(total // 12, total % 12 + 1, 1)


def _row(txn_id: str, day: date, amount: int, direction: str, category_id: str) -> Dict:
    name = CATEGORIES[category_id][0]
    return {
        "id": txn_id,
        "amount": amount,
        "direction": direction,
        "occurred_at": f"{day.isoformat()}T12:00:00+00:00",
        "category_id": category_id,
        "categories": {"id": category_id, "name": name},
    }


def _persona_rows(user_id: str, today: date) -> List[Dict]:
    if user_id == "user_empty":
        return []

    rows = []
    for offset in range(HISTORY_MONTHS - 1, -1, -1):
        start = _month_start(today, offset)
        step = HISTORY_MONTHS - offset
        key = f"{start.year}{start.month:02d}"

        rows.append(_row(f"{user_id}_{key}_salary", start, 500000, "income", "cat_salary"))
        rows.append(_row(f"{user_id}_{key}_rent", start, 150000, "expense", "cat_rent"))
        rows.append(_row(f"{user_id}_{key}_groc1", start, 35000, "expense", "cat_groceries"))
        rows.append(_row(f"{user_id}_{key}_groc2", start, 35000, "expense", "cat_groceries"))

        restaurants = 20000 if user_id == "user_steady" else 10000 + 5000 * step
        rows.append(_row(f"{user_id}_{key}_rest", start, restaurants, "expense", "cat_restaurants"))

    return rows


def _matches(row: Dict, column: str, condition: str) -> bool:
    op, _, value = condition.partition(".")
    actual = str(row.get(column, ""))
    if column == "occurred_at" and "T" not in value:
        actual = actual[:10]
    elif column == "occurred_at":
        actual = actual[:19]
        value = value[:19]
    if op == "eq":
        return actual == value
    if op == "gte":
        return actual >= value
    if op == "lte":
        return actual <= value
    raise HTTPException(status_code=400, detail=f"unsupported operator {op}")


def _filter(rows: List[Dict], request: Request) -> List[Dict]:
    for column, condition in request.query_params.multi_items():
        if column in ("select", "order", "user_id"):
            continue
        rows = [row for row in rows if _matches(row, column, condition)]
    return rows


def _user_id(request: Request) -> str:
    condition = request.query_params.get("user_id", "")
    if not condition.startswith("eq."):
        raise HTTPException(status_code=400, detail="user_id=eq.<id> is required")
    user_id = condition[3:]
    if user_id not in PERSONAS:
        raise HTTPException(status_code=404, detail="user not found")
    return user_id


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/rest/v1/transactions")
def get_transactions(request: Request):
    rows = _persona_rows(_user_id(request), date.today())
    rows = _filter(rows, request)
    descending = request.query_params.get("order", "").endswith(".desc")
    return sorted(rows, key=lambda row: row["occurred_at"], reverse=descending)


@app.get("/rest/v1/categories")
def get_categories(request: Request):
    _user_id(request)
    rows = [{"id": cid, "name": name, "kind": kind} for cid, (name, kind) in CATEGORIES.items()]
    return _filter(rows, request)
