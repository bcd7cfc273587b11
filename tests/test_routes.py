import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.database.connection import get_db
from app.main import app
from app.services.seed_service import seed_database


@pytest.fixture()
def client(db):
    seed_database(db, settings.FIXTURES_DIR)
    app.dependency_overrides[get_db] = lambda: db
    try:
        # no context manager: startup (seeding + scheduler) stays off
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_list_and_get_products(client):
    res = client.get("/products/")
    assert res.status_code == 200
    assert [p["id"] for p in res.json()] == [1, 2, 3, 4]

    res = client.get("/products/1")
    assert res.json()["name"] == "Portland Cement 53 Grade"

    res = client.get("/products/999")
    assert res.status_code == 404
    assert res.json()["detail"] == "Product not found"


def test_search_products(client):
    res = client.get("/products/search", params={"q": "chemicals"})
    assert [p["id"] for p in res.json()] == [2, 4]


@pytest.mark.parametrize(
    "customer_id,expected",
    [
        (5, 95.0),  # volume 5%
        (1, 85.0),  # volume 5%, then contract price 10 off
    ],
)
def test_calculate_price(client, customer_id, expected):
    res = client.post(
        "/pricing/calculate",
        json={"product_id": "1", "customer_id": str(customer_id), "quantity": 20, "base_price": 100},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["final_price"] == pytest.approx(expected)
    assert body["total_discount"] == pytest.approx(100 - expected)
    assert body["applied_discounts"][0]["type"] == "volume"


def test_calculate_price_rejects_zero_quantity(client):
    res = client.post(
        "/pricing/calculate",
        json={"product_id": 1, "customer_id": 1, "quantity": 0, "base_price": 100},
    )
    assert res.status_code == 422


def test_product_price_from_retail_tier(client):
    res = client.get("/products/1/calculate-price", params={"customer_id": 5, "quantity": 60})
    assert res.status_code == 200
    body = res.json()
    assert body["price_tier"] == "retail"
    assert body["original_price"] == 410.0
    assert body["final_price"] == pytest.approx(410.0 * 0.92)
    assert body["savings_percent"] == "8.0"


def test_volume_breakpoints(client):
    res = client.get("/pricing/volume-breakpoints", params={"product_id": 1, "customer_id": 5})
    assert [b["quantity"] for b in res.json()] == [10, 50, 200]


def test_validate_rule_endpoint_does_not_save(client):
    before = len(client.get("/pricing-rules/").json())

    res = client.post("/pricing-rules/validate", json={"name": " ", "discount_type": "volume"})

    assert res.status_code == 200
    assert res.json()["is_valid"] is False
    assert len(res.json()["errors"]) == 2
    assert len(client.get("/pricing-rules/").json()) == before


def test_pricing_rule_crud(client):
    payload = {
        "name": "Diwali promo",
        "rule_type": "promotional",
        "discount_type": "promotional",
        "applicable_products": [3],
        "discount_value": {"type": "percentage", "value": 4},
        "min_quantity": 2,
    }
    res = client.post("/pricing-rules/", json=payload)
    assert res.status_code == 201
    rule = res.json()
    assert rule["is_active"] is True
    assert rule["id"] == 5

    res = client.put(f"/pricing-rules/{rule['id']}", json={"name": "Diwali promo 2026"})
    assert res.json()["name"] == "Diwali promo 2026"
    assert res.json()["discount_value"] == {"type": "percentage", "value": 4.0}

    assert rule["id"] in [r["id"] for r in client.get("/pricing-rules/by-product/3").json()]

    res = client.post(f"/pricing-rules/{rule['id']}/deactivate")
    assert res.json()["is_active"] is False
    assert rule["id"] not in [r["id"] for r in client.get("/pricing-rules/active").json()]

    assert client.delete(f"/pricing-rules/{rule['id']}").status_code == 200
    res = client.get(f"/pricing-rules/{rule['id']}")
    assert res.status_code == 404
    assert res.json()["detail"] == "Pricing rule not found"


def test_batch_receive_and_allocate(client):
    before = client.get("/products/3").json()["current_stock"]

    res = client.post(
        "/products/3/batches",
        json={
            "batch_number": "IC-2610",
            "manufacturing_date": "2026-10-01",
            "expiry_date": "2031-10-01",
            "quantity": 100,
            "supplier_name": "IronCore Steel",
            "storage_location": "Yard 2",
        },
    )
    assert res.status_code == 201
    batch = res.json()
    assert batch["id"] == 6
    assert batch["quality_check_status"] == "pending"
    assert client.get("/products/3").json()["current_stock"] == before + 100

    res = client.post(f"/products/3/batches/{batch['id']}/allocate", json={"quantity": 60})
    assert res.status_code == 200
    assert res.json() == {
        "batch_id": batch["id"],
        "batch_number": "IC-2610",
        "allocated_quantity": 60,
        "expiry_date": "2031-10-01",
    }

    res = client.post(f"/products/3/batches/{batch['id']}/allocate", json={"quantity": 41})
    assert res.status_code == 409
    assert res.json()["detail"] == "Insufficient batch quantity"
    assert client.get("/products/3").json()["current_stock"] == before + 40


def test_allocate_unknown_batch(client):
    res = client.post("/products/1/batches/3/allocate", json={"quantity": 1})
    assert res.status_code == 404
    assert res.json()["detail"] == "Batch not found"


def test_expiring_batches_sorted(client):
    res = client.get("/batches/expiring", params={"days": 30})
    assert res.status_code == 200
    days = [b["days_to_expiry"] for b in res.json()]
    assert days == sorted(days)
    # fixture lot that expired on 2026-09-30
    expired = [b for b in res.json() if b["batch_number"] == "SP-WPC-2309"]
    assert expired and expired[0]["days_to_expiry"] < 0
    assert expired[0]["product_name"] == "Waterproofing Compound 20L"


def test_quality_status_transitions(client):
    res = client.post("/products/2/batches/4/quality", json={"status": "passed"})
    assert res.status_code == 200
    assert res.json()["quality_check_status"] == "passed"

    res = client.post("/products/2/batches/4/quality", json={"status": "failed"})
    assert res.status_code == 400


def test_legacy_stock_and_reorder_points(client):
    res = client.get("/inventory/reorder-points")
    assert {p["id"]: p["suggested_order_quantity"] for p in res.json()} == {2: 45, 4: 42}

    res = client.post("/products/3/stock", json={"quantity": 5000, "operation": "subtract"})
    assert res.status_code == 200
    assert res.json()["current_stock"] == 0
    assert res.json()["status"] == "low_stock"

    assert 3 in [p["id"] for p in client.get("/inventory/low-stock").json()]


def test_stock_reconciliation(client):
    res = client.get("/products/1/stock-reconciliation")
    assert res.json() == {
        "product_id": 1,
        "current_stock": 420,
        "batch_total": 420,
        "difference": 0,
        "is_consistent": True,
    }


def test_health_and_metrics(client):
    assert client.get("/health").json()["status"] == "ok"

    client.get("/products/404")
    body = client.get("/metrics").json()
    assert body["products"] == 4
    assert body["batches"] == 5
    assert body["requests_count"] >= 2
    assert body["errors_count"] >= 1


def test_rules_by_customer_and_reactivation(client):
    # rule 2 names customer 1, rule 4 is global
    assert [r["id"] for r in client.get("/pricing-rules/by-customer/1").json()] == [2, 4]
    assert [r["id"] for r in client.get("/pricing-rules/by-customer/9").json()] == [4]

    assert 4 not in [r["id"] for r in client.get("/pricing-rules/active").json()]
    res = client.post("/pricing-rules/4/activate")
    assert res.status_code == 200
    assert res.json()["is_active"] is True
