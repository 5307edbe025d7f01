# product_service/main.py
from fastapi import FastAPI, HTTPException

app = FastAPI(title="Store Catalog Service (dev mock)")


STORES = {
    1: {"id": 1, "name": "Main Street"},
    2: {"id": 2, "name": "Harbor Outlet"},
}

# product offerings: catalog product configured per store
OFFERINGS = {
    1: {"id": 1, "store_id": 1, "name": "Keyboard", "price": "199.99", "is_active": True},
    2: {"id": 2, "store_id": 1, "name": "Mouse", "price": "49.50", "is_active": True},
    3: {"id": 3, "store_id": 1, "name": "Monitor", "price": "899.00", "is_active": False},
    4: {"id": 4, "store_id": 2, "name": "Keyboard", "price": "189.00", "is_active": True},
}


@app.get("/stores/{store_id}")
def get_store(store_id: int):
    store = STORES.get(store_id)
    if not store:
        raise HTTPException(status_code=404, detail="Store not found")
    return store


@app.get("/stores/{store_id}/products/{offering_id}")
def get_offering(store_id: int, offering_id: int):
    offering = OFFERINGS.get(offering_id)
    if not offering or offering["store_id"] != store_id:
        raise HTTPException(status_code=404, detail="Product not found")
    return offering
