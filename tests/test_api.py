import pytest

from salepdv.models.user import RoleEnum


@pytest.fixture
def seller_headers(auth_headers, seller):
    return auth_headers(seller)


@pytest.fixture
def tables(api, seller_headers):
    res = api.post("/tables/bulk", json={"quantity": 2}, headers=seller_headers)
    assert res.status_code == 201
    return res.json()


def _place(api, headers, table_id, items=None):
    items = items or [{"product_name": "Milho", "price": 6, "quantity": 2}]
    return api.post("/orders", json={"table_id": table_id, "items": items}, headers=headers)


def test_root(api):
    assert api.get("/").status_code == 200


def test_register_login_and_me(api, seller):
    res = api.post("/auth/register", json={
        "username": "carla", "password": "segredo1", "name": "Carla", "seller_id": seller.id,
    })
    assert res.status_code == 201
    assert res.json()["papel"] == "client"
    assert res.json()["seller_id"] == seller.id

    res = api.post("/auth/login", json={"username": "carla", "password": "segredo1"})
    assert res.status_code == 200
    token = res.json()["access_token"]

    me = api.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["username"] == "carla"


def test_register_against_table_occupies_it(api, seller, seller_headers, tables):
    res = api.post("/auth/register", json={
        "username": "davi", "password": "segredo1", "phone": "1188887777",
        "seller_id": seller.id, "table_id": tables[0]["id"],
    })
    assert res.status_code == 201
    assert res.json()["table_number"] == 1

    table = api.get(f"/tables/{tables[0]['id']}", headers=seller_headers).json()
    assert table["status"] == "occupied"
    assert table["customer_phone"] == "1188887777"


def test_login_wrong_password(api, seller):
    res = api.post("/auth/login", json={"username": "carrinho", "password": "nope"})
    assert res.status_code == 400


def test_me_requires_token(api):
    assert api.get("/auth/me").status_code == 401


def test_bulk_numbering_over_http(api, seller_headers, tables):
    assert [t["number"] for t in tables] == [1, 2]
    res = api.post("/tables/bulk", json={"quantity": 3}, headers=seller_headers)
    assert [t["number"] for t in res.json()] == [3, 4, 5]

    res = api.post("/tables/bulk", json={"quantity": 0}, headers=seller_headers)
    assert res.status_code == 400


def test_client_cannot_manage_tables(api, auth_headers, client_user):
    res = api.post("/tables/bulk", json={"quantity": 1}, headers=auth_headers(client_user))
    assert res.status_code == 403


def test_available_tables_is_public(api, seller, seller_headers, tables):
    api.patch("/auth/me/settings", json={"table_naming": "guarda-sol"}, headers=seller_headers)

    res = api.get(f"/tables/available?sellerId={seller.id}")

    assert res.status_code == 200
    body = res.json()
    assert body["table_naming"] == "guarda-sol"
    assert [t["number"] for t in body["tables"]] == [1, 2]


def test_lifecycle_scenario(api, auth_headers, client_user, seller_headers, tables):
    client_headers = auth_headers(client_user)
    t1 = tables[0]["id"]

    res = _place(api, client_headers, t1)
    assert res.status_code == 201
    order = res.json()
    assert order["status"] == "aguardando"
    assert order["total"] == 12.0
    assert api.get(f"/tables/{t1}", headers=seller_headers).json()["status"] == "occupied"

    res = api.patch(f"/orders/{order['id']}/status", json={"status": "em_preparo"}, headers=client_headers)
    assert res.status_code == 403

    res = api.patch(f"/orders/{order['id']}/status", json={"status": "em_preparo"}, headers=seller_headers)
    assert res.status_code == 200

    res = api.patch(f"/orders/{order['id']}/status", json={"status": "cancelado"}, headers=client_headers)
    assert res.status_code == 403

    res = api.patch(f"/orders/{order['id']}/status", json={"status": "entregue"}, headers=seller_headers)
    assert res.json()["status"] == "entregue"

    res = api.post(f"/tables/{t1}/release", headers=seller_headers)
    assert res.status_code == 200
    assert res.json()["archived"] == [order["id"]]
    assert res.json()["table"]["status"] == "available"

    res = api.get(f"/orders/{order['id']}", headers=client_headers)
    assert res.json()["status"] == "arquivado"

    res = api.patch(f"/orders/{order['id']}/status", json={"status": "aguardando"}, headers=seller_headers)
    assert res.status_code == 409


def test_duplicate_active_table_scenario(api, auth_headers, client_user, tables):
    headers = auth_headers(client_user)

    assert _place(api, headers, tables[0]["id"]).status_code == 201

    res = _place(api, headers, tables[1]["id"])
    assert res.status_code == 400
    assert "outra mesa" in res.json()["detail"]

    assert _place(api, headers, tables[0]["id"]).status_code == 201


def test_client_total_is_ignored(api, auth_headers, client_user, tables):
    res = api.post("/orders", json={
        "table_id": tables[0]["id"],
        "items": [{"product_name": "Picolé", "price": 4, "quantity": 3}],
        "total": 1,
    }, headers=auth_headers(client_user))
    assert res.json()["total"] == 12.0


def test_catalog_price_snapshot(api, auth_headers, client_user, seller_headers, tables):
    product = api.post("/products", json={"name": "Água de coco", "price": 8.5}, headers=seller_headers).json()

    res = _place(api, auth_headers(client_user), tables[0]["id"], items=[
        {"product_id": product["id"], "price": 0.01, "quantity": 2},
    ])

    item = res.json()["items"][0]
    assert item["product_name"] == "Água de coco"
    assert item["price"] == 8.5
    assert res.json()["total"] == 17.0


def test_replace_items_and_cancel_by_emptying(api, auth_headers, client_user, seller_headers, tables):
    headers = auth_headers(client_user)
    order = _place(api, headers, tables[0]["id"]).json()

    res = api.put(f"/orders/{order['id']}/items", json={"items": [
        {"product_name": "Milho", "price": 6, "quantity": 1},
        {"product_name": "Queijo coalho", "price": 9, "quantity": 2},
    ]}, headers=headers)
    assert res.status_code == 200
    assert res.json()["total"] == 24.0

    res = api.put(f"/orders/{order['id']}/items", json={"items": []}, headers=headers)
    assert res.json()["status"] == "cancelado"
    assert api.get(f"/tables/{tables[0]['id']}", headers=seller_headers).json()["status"] == "available"


def test_clients_cannot_see_each_others_orders(api, auth_headers, client_user, other_client, tables):
    order = _place(api, auth_headers(client_user), tables[0]["id"]).json()
    other = auth_headers(other_client)

    assert api.get(f"/orders/{order['id']}", headers=other).status_code == 403
    assert api.delete(f"/orders/{order['id']}", headers=other).status_code == 403
    assert api.get("/orders", headers=other).json() == []
    assert api.get(f"/users/{client_user.id}/orders", headers=other).status_code == 403


def test_admin_cannot_touch_other_cart(api, auth_headers, other_seller, client_user, tables):
    order = _place(api, auth_headers(client_user), tables[0]["id"]).json()
    headers = auth_headers(other_seller)

    res = api.patch(f"/orders/{order['id']}/status", json={"status": "em_preparo"}, headers=headers)
    assert res.status_code == 403
    assert api.delete(f"/tables/{tables[0]['id']}", headers=headers).status_code == 403
    assert api.post(f"/tables/{tables[0]['id']}/release", headers=headers).status_code == 403


def test_delete_table_in_use(api, auth_headers, client_user, seller_headers, tables):
    _place(api, auth_headers(client_user), tables[0]["id"])

    assert api.delete(f"/tables/{tables[0]['id']}", headers=seller_headers).status_code == 409
    assert api.delete(f"/tables/{tables[1]['id']}", headers=seller_headers).status_code == 204


def test_payment_and_daily(api, auth_headers, client_user, seller_headers, tables):
    order = _place(api, auth_headers(client_user), tables[0]["id"]).json()

    res = api.patch(f"/orders/{order['id']}/payment", json={"payment_method": "pix"}, headers=seller_headers)
    assert res.status_code == 200
    assert res.json()["is_paid"] is True

    res = api.patch(f"/orders/{order['id']}/payment", json={"payment_method": "cheque"}, headers=seller_headers)
    assert res.status_code == 422

    assert api.get("/orders/daily", headers=seller_headers).json() == {"total": 12.0, "count": 1}


def test_order_listings(api, auth_headers, client_user, seller_headers, tables):
    order = _place(api, auth_headers(client_user), tables[0]["id"]).json()

    assert [o["id"] for o in api.get("/orders", headers=seller_headers).json()] == [order["id"]]
    assert [o["id"] for o in api.get("/orders/recent", headers=seller_headers).json()] == [order["id"]]
    assert len(api.get("/orders/status/aguardando", headers=seller_headers).json()) == 1
    assert api.get("/orders/status/entregue", headers=seller_headers).json() == []
    res = api.get(f"/orders/table/{tables[0]['id']}?active_only=true", headers=seller_headers)
    assert [o["id"] for o in res.json()] == [order["id"]]
    assert len(api.get("/tables/occupied", headers=seller_headers).json()) == 1


def test_products_crud(api, auth_headers, client_user, seller_headers):
    res = api.post("/products", json={"name": "Pastel", "price": 7, "category": "salgados"}, headers=seller_headers)
    assert res.status_code == 201
    pid = res.json()["id"]

    res = api.put(f"/products/{pid}", json={"is_active": False}, headers=seller_headers)
    assert res.json()["is_active"] is False

    client_headers = auth_headers(client_user)
    assert [p["id"] for p in api.get("/products", headers=client_headers).json()] == [pid]
    assert api.get("/products/active", headers=client_headers).json() == []
    assert api.post("/products", json={"name": "X", "price": 1}, headers=client_headers).status_code in (403, 422)

    assert api.delete(f"/products/{pid}", headers=seller_headers).status_code == 204
    assert api.get(f"/products/{pid}", headers=client_headers).status_code == 404


def test_sellers_and_users(api, auth_headers, seller, client_user, seller_headers):
    sellers = api.get("/users/sellers").json()
    assert [s["id"] for s in sellers] == [seller.id]

    users = api.get("/users", headers=seller_headers).json()
    assert [u["id"] for u in users] == [client_user.id]

    assert api.get("/users", headers=auth_headers(client_user)).status_code == 403


def test_stats_require_admin(api, auth_headers, client_user, seller_headers):
    assert api.get("/stats/revenue/summary", headers=auth_headers(client_user)).status_code == 403
    res = api.get("/stats/revenue/summary", headers=seller_headers)
    assert res.json() == {"today": 0.0, "thisMonth": 0.0, "thisYear": 0.0}
    assert api.get("/stats/revenue/daily", headers=seller_headers).json() == []


def test_register_against_occupied_table_conflicts(api, seller, seller_headers, tables):
    first = api.post("/auth/register", json={
        "username": "davi", "password": "segredo1", "seller_id": seller.id, "table_id": tables[0]["id"],
    })
    assert first.status_code == 201

    res = api.post("/auth/register", json={
        "username": "elisa", "password": "segredo1", "seller_id": seller.id, "table_id": tables[0]["id"],
    })
    assert res.status_code == 409
    assert api.post("/auth/login", json={"username": "elisa", "password": "segredo1"}).status_code == 400


def test_bound_client_cannot_order_at_another_cart(api, auth_headers, client_user, other_seller, seller_headers, tables):
    foreign = api.post("/tables/bulk", json={"quantity": 1}, headers=auth_headers(other_seller)).json()
    headers = auth_headers(client_user)

    res = api.post("/orders", json={
        "seller_id": other_seller.id,
        "table_id": foreign[0]["id"],
        "items": [{"product_name": "Milho", "price": 6, "quantity": 1}],
    }, headers=headers)
    assert res.status_code == 403
    assert api.get("/orders", headers=auth_headers(other_seller)).json() == []
    assert api.get(f"/tables/{foreign[0]['id']}", headers=auth_headers(other_seller)).json()["status"] == "available"

    assert api.get(f"/products?sellerId={other_seller.id}", headers=headers).status_code == 403


def test_bound_client_may_repeat_own_cart(api, auth_headers, client_user, seller, tables):
    res = api.post("/orders", json={
        "seller_id": seller.id,
        "table_id": tables[0]["id"],
        "items": [{"product_name": "Milho", "price": 6, "quantity": 1}],
    }, headers=auth_headers(client_user))
    assert res.status_code == 201
    assert res.json()["seller_id"] == seller.id


def test_unbound_client_picks_cart(api, auth_headers, make_user, seller, tables):
    walker = make_user("caio")
    headers = auth_headers(walker)
    items = [{"product_name": "Milho", "price": 6, "quantity": 1}]

    assert api.post("/orders", json={"table_id": tables[0]["id"], "items": items}, headers=headers).status_code == 400

    res = api.post("/orders", json={"seller_id": seller.id, "table_id": tables[0]["id"], "items": items}, headers=headers)
    assert res.status_code == 201
    assert res.json()["seller_id"] == seller.id


def test_negative_item_price_is_rejected(api, auth_headers, client_user, tables):
    res = _place(api, auth_headers(client_user), tables[0]["id"], items=[
        {"product_name": "Desconto", "price": -50, "quantity": 1},
    ])
    assert res.status_code == 422


def test_inactive_product_cannot_be_ordered(api, auth_headers, client_user, seller_headers, tables):
    product = api.post("/products", json={"name": "Pastel", "price": 7}, headers=seller_headers).json()
    api.put(f"/products/{product['id']}", json={"is_active": False}, headers=seller_headers)

    res = _place(api, auth_headers(client_user), tables[0]["id"], items=[{"product_id": product["id"], "quantity": 1}])
    assert res.status_code == 400
    assert "indisponível" in res.json()["detail"]


def test_admin_creates_and_updates_customer(api, auth_headers, seller, client_user, seller_headers):
    res = api.post("/users", json={
        "username": "fabio", "password": "segredo1", "name": "Fábio", "seller_id": 999,
    }, headers=seller_headers)
    assert res.status_code == 201
    created = res.json()
    assert created["papel"] == "client"
    assert created["seller_id"] == seller.id
    assert "senha_hash" not in created

    dup = api.post("/users", json={"username": "fabio", "password": "segredo1"}, headers=seller_headers)
    assert dup.status_code == 400
    assert api.post("/users", json={"username": "gil", "password": "segredo1"},
                    headers=auth_headers(client_user)).status_code == 403

    res = api.put(f"/users/{created['id']}", json={"phone": "1177776666", "password": "novasenha"},
                  headers=seller_headers)
    assert res.status_code == 200
    assert res.json()["phone"] == "1177776666"
    assert api.post("/auth/login", json={"username": "fabio", "password": "novasenha"}).status_code == 200
    assert api.post("/auth/login", json={"username": "fabio", "password": "segredo1"}).status_code == 400


def test_admin_cannot_manage_other_carts_customer(api, auth_headers, client_user, other_seller):
    headers = auth_headers(other_seller)
    assert api.put(f"/users/{client_user.id}", json={"name": "X"}, headers=headers).status_code == 403
    assert api.delete(f"/users/{client_user.id}", headers=headers).status_code == 403
    assert api.put("/users/9999", json={"name": "X"}, headers=headers).status_code == 404


def test_user_deletion_rules(api, auth_headers, seller, client_user, other_client, seller_headers, tables):
    order = _place(api, auth_headers(client_user), tables[0]["id"]).json()

    # clients cannot delete each other
    assert api.delete(f"/users/{client_user.id}", headers=auth_headers(other_client)).status_code == 403
    # a cart with tables and customers stays
    assert api.delete(f"/users/{seller.id}", headers=seller_headers).status_code == 409

    assert api.delete(f"/users/{other_client.id}", headers=seller_headers).status_code == 204
    assert api.delete(f"/users/{client_user.id}", headers=auth_headers(client_user)).status_code == 204
    assert api.post("/auth/login", json={"username": "ana", "password": "secret123"}).status_code == 400

    kept = api.get(f"/orders/{order['id']}", headers=seller_headers).json()
    assert kept["user_id"] is None
    assert kept["user_name"] == client_user.display_name


def test_empty_cart_can_delete_itself(api, auth_headers, make_user):
    lonely = make_user("barraca", papel=RoleEnum.admin)
    assert api.delete(f"/users/{lonely.id}", headers=auth_headers(lonely)).status_code == 204


def test_password_recovery(api, client_user):
    res = api.post("/users/find", json={"identifier": "11999990000"})
    assert res.status_code == 200
    assert res.json() == {"id": client_user.id, "username": "ana", "name": "Ana"}
    assert api.post("/users/find", json={"identifier": "ana"}).json()["id"] == client_user.id
    assert api.post("/users/find", json={"identifier": "ninguem"}).status_code == 404

    wrong = api.patch(f"/users/{client_user.id}/password", json={"phone": "110000", "password": "novasenha"})
    assert wrong.status_code == 403

    res = api.patch(f"/users/{client_user.id}/password", json={"phone": "11999990000", "password": "novasenha"})
    assert res.json() == {"message": "Senha atualizada com sucesso"}
    assert api.post("/auth/login", json={"username": "ana", "password": "novasenha"}).status_code == 200


def test_password_recovery_needs_phone_on_file(api, other_client):
    res = api.patch(f"/users/{other_client.id}/password", json={"phone": "1", "password": "novasenha"})
    assert res.status_code == 403
    assert api.patch("/users/9999/password", json={"phone": "1", "password": "novasenha"}).status_code == 404
