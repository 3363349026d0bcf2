from decimal import Decimal

from restaurant_pos.config import Settings


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_burger_order_lifecycle(client):
    response = await client.post(
        "/menu-items",
        json={"name": "Burger", "description": "Beef, cheddar", "price": 12.50, "category": "Mains"},
    )
    assert response.status_code == 201
    burger = response.json()
    assert burger["price"] == "12.50"
    assert burger["is_available"] is True

    response = await client.post(
        "/orders",
        json={"table_number": 4, "items": [{"menu_item_id": burger["id"], "quantity": 2, "price": 12.50}]},
    )
    assert response.status_code == 201
    order = response.json()
    assert order["table_number"] == 4
    assert order["status"] == "pending"
    assert order["total_amount"] == "25.00"
    assert [(i["name"], i["quantity"], i["price"]) for i in order["items"]] == [("Burger", 2, "12.50")]

    response = await client.put(f"/orders/{order['id']}/status", json={"status": "preparing"})
    assert response.status_code == 200
    assert response.json()["status"] == "preparing"
    assert response.json()["total_amount"] == "25.00"

    response = await client.delete(f"/orders/{order['id']}")
    assert response.status_code == 204

    response = await client.get("/orders")
    assert response.status_code == 200
    assert response.json() == []

    response = await client.get(f"/orders/{order['id']}")
    assert response.status_code == 404


async def test_order_item_accepts_legacy_id_field(client, menu):
    response = await client.post(
        "/orders",
        json={"table_number": 2, "items": [{"id": menu["lemonade"].id, "quantity": 2, "price": 3.25}]},
    )

    assert response.status_code == 201
    assert response.json()["items"][0]["menu_item_id"] == menu["lemonade"].id
    assert response.json()["total_amount"] == "6.50"


async def test_create_order_without_items_is_400(client, menu):
    response = await client.post("/orders", json={"table_number": 2, "items": []})
    assert response.status_code == 400
    assert response.json()["detail"] == "Order must include at least one item"

    response = await client.post("/orders", json={"table_number": 2})
    assert response.status_code == 400

    response = await client.get("/orders")
    assert response.json() == []


async def test_malformed_order_body_is_400(client, menu):
    response = await client.post(
        "/orders",
        json={"table_number": 0, "items": [{"menu_item_id": menu["burger"].id, "quantity": 0}]},
    )

    assert response.status_code == 400
    assert "table_number" in response.json()["detail"]


async def test_full_update_and_missing_order(client, menu):
    response = await client.post(
        "/orders",
        json={"table_number": 1, "items": [{"menu_item_id": menu["burger"].id, "quantity": 1}]},
    )
    order_id = response.json()["id"]

    response = await client.put(
        f"/orders/{order_id}",
        json={
            "table_number": 3,
            "status": "preparing",
            "items": [
                {"menu_item_id": menu["fries"].id, "quantity": 2},
                {"menu_item_id": menu["lemonade"].id, "quantity": 1},
            ],
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["table_number"] == 3
    assert body["status"] == "preparing"
    assert body["total_amount"] == "11.25"
    assert sorted(i["name"] for i in body["items"]) == ["Fries", "Lemonade"]

    missing = order_id + 100
    payload = {"table_number": 3, "items": [{"menu_item_id": menu["fries"].id, "quantity": 1}]}
    assert (await client.put(f"/orders/{missing}", json=payload)).status_code == 404
    assert (await client.put(f"/orders/{missing}/status", json={"status": "ready"})).status_code == 404
    assert (await client.delete(f"/orders/{missing}")).status_code == 404


async def test_illegal_status_change_is_409(client, menu):
    response = await client.post(
        "/orders",
        json={"table_number": 1, "items": [{"menu_item_id": menu["burger"].id, "quantity": 1}]},
    )
    order_id = response.json()["id"]

    response = await client.put(f"/orders/{order_id}/status", json={"status": "delivered"})
    assert response.status_code == 409

    response = await client.put(f"/orders/{order_id}/status", json={"status": "eaten"})
    assert response.status_code == 400


async def test_menu_item_crud(client, menu):
    response = await client.get("/menu-items")
    assert [i["name"] for i in response.json()] == ["Lemonade", "Burger", "Soup of the day", "Fries"]

    item_id = menu["soup"].id
    response = await client.put(f"/menu-items/{item_id}", json={"is_available": True, "price": "6.75"})
    assert response.status_code == 200
    assert response.json()["is_available"] is True
    assert response.json()["price"] == "6.75"

    response = await client.put(f"/menu-items/{item_id}", json={"price": None})
    assert response.status_code == 400

    response = await client.post("/menu-items", json={"name": "Water", "price": 0, "category": "Drinks"})
    assert response.status_code == 400

    assert (await client.delete(f"/menu-items/{item_id}")).status_code == 204
    assert (await client.get(f"/menu-items/{item_id}")).status_code == 404
    assert (await client.delete(f"/menu-items/{item_id}")).status_code == 404
    assert (await client.put("/menu-items/999", json={"name": "Nope"})).status_code == 404


async def test_delete_menu_item_in_use_is_409(client, menu):
    await client.post(
        "/orders",
        json={"table_number": 1, "items": [{"menu_item_id": menu["fries"].id, "quantity": 1}]},
    )

    response = await client.delete(f"/menu-items/{menu['fries'].id}")

    assert response.status_code == 409
    assert Decimal((await client.get(f"/menu-items/{menu['fries'].id}")).json()["price"]) == Decimal("4.00")


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://pos:pos@db/pos")
    monkeypatch.setenv("DB_POOL_SIZE", "3")
    monkeypatch.setenv("API_PREFIX", "/api")

    settings = Settings()

    assert settings.DATABASE_URL == "postgresql+asyncpg://pos:pos@db/pos"
    assert settings.DB_POOL_SIZE == 3
    assert settings.API_PREFIX == "/api"


async def test_oversized_quantity_and_table_number_are_400(client, menu):
    response = await client.post(
        "/orders",
        json={"table_number": 1, "items": [{"menu_item_id": menu["burger"].id, "quantity": 10_000_000}]},
    )
    assert response.status_code == 400
    assert "quantity" in response.json()["detail"]

    response = await client.post(
        "/orders",
        json={"table_number": 2**31, "items": [{"menu_item_id": menu["burger"].id, "quantity": 1}]},
    )
    assert response.status_code == 400
    assert "table_number" in response.json()["detail"]

    assert (await client.get("/orders")).json() == []
