"""Tests for product API endpoints."""

from fastapi.testclient import TestClient


def create_category(client: TestClient, name: str) -> str:
    """Create a root category and return its id."""
    response = client.post("/api/categories", json={"name": name})
    assert response.status_code == 201
    return response.json()["id"]


def create_product(client: TestClient, **fields) -> dict:
    """Create a product and return the response body."""
    response = client.post("/api/products", json={"name": "Recliner", **fields})
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateProduct:
    """Tests for POST /api/products."""

    def test_requires_auth(self, client: TestClient) -> None:
        """Anonymous callers cannot create products."""
        assert client.post("/api/products", json={"name": "Recliner"}).status_code == 401

    def test_create_with_coercion(self, auth_client: TestClient) -> None:
        """Loose field values are coerced."""
        data = create_product(
            auth_client,
            original_price="1299.50",
            discounted_price="",
            discount_percentage=0,
            shipping_included="true",
            price_includes_tax="yes",
            store_purchase_only=True,
            features="Soft, Reclining , ,USB",
        )
        assert data["original_price"] == 1299.5
        assert data["discounted_price"] is None
        assert data["discount_percentage"] is None
        assert data["shipping_included"] is True
        assert data["price_includes_tax"] is False
        assert data["store_purchase_only"] is True
        assert data["features"] == ["Soft", "Reclining", "USB"]
        assert data["status"] == "active"

    def test_unparsable_price(self, auth_client: TestClient) -> None:
        """Non-numeric prices are rejected."""
        response = auth_client.post("/api/products", json={"name": "Recliner", "original_price": "cheap"})
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "original_price"

    def test_non_finite_price(self, auth_client: TestClient) -> None:
        """Infinite and NaN prices are rejected and nothing is stored."""
        response = auth_client.post(
            "/api/products",
            json={"name": "Sofa", "originalPrice": "inf", "discountedPrice": "nan"},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert auth_client.get("/api/products").json() == []

    def test_strict_categories(self, auth_client: TestClient) -> None:
        """One unknown category rejects the create."""
        c1 = create_category(auth_client, "C1")
        response = auth_client.post(
            "/api/products",
            json={"name": "Recliner", "categoryIds": f'["{c1}", "bogus"]'},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "UNKNOWN_CATEGORIES"
        assert body["details"]["provided_count"] == 2
        assert body["details"]["found_count"] == 1
        assert auth_client.get("/api/products").json() == []

    def test_status_literal(self, auth_client: TestClient) -> None:
        """Only the exact literal "inactive" creates an inactive product."""
        assert create_product(auth_client, status="inactive")["status"] == "inactive"
        assert create_product(auth_client, status="archived")["status"] == "active"

    def test_multipart_with_images(self, auth_client: TestClient, image_storage) -> None:
        """Form bodies with uploaded images are accepted."""
        c1 = create_category(auth_client, "C1")
        response = auth_client.post(
            "/api/products",
            data={"name": "Recliner", "category_ids": c1, "shipping_included": "true"},
            files=[
                ("images", ("front.png", b"\x89PNG-1", "image/png")),
                ("images", ("side.png", b"\x89PNG-2", "image/png")),
            ],
        )
        assert response.status_code == 201
        data = response.json()
        assert data["category_ids"] == [c1]
        assert data["shipping_included"] is True
        assert data["image_urls"] == [
            "https://cdn.test/products/front.png",
            "https://cdn.test/products/side.png",
        ]
        assert len(image_storage.uploads) == 2


class TestReadProducts:
    """Tests for product reads."""

    def test_visibility(self, client: TestClient, auth_client: TestClient) -> None:
        """Inactive products are hidden from anonymous callers."""
        shown = create_product(auth_client, name="Shown")
        hidden = create_product(auth_client, name="Hidden", status="inactive")

        assert [p["name"] for p in client.get("/api/products").json()] == ["Shown"]
        assert len(auth_client.get("/api/products").json()) == 2

        assert client.get(f"/api/products/{shown['id']}").status_code == 200
        hidden_response = client.get(f"/api/products/{hidden['id']}")
        missing_response = client.get("/api/products/missing")
        assert hidden_response.status_code == missing_response.status_code == 404
        assert hidden_response.json()["error_code"] == missing_response.json()["error_code"]
        assert auth_client.get(f"/api/products/{hidden['id']}").status_code == 200


class TestUpdateProduct:
    """Tests for PUT /api/products/{id}."""

    def test_lenient_categories(self, auth_client: TestClient) -> None:
        """Unknown ids are dropped on update."""
        c1 = create_category(auth_client, "C1")
        product = create_product(auth_client)
        response = auth_client.put(
            f"/api/products/{product['id']}",
            json={"category_ids": [c1, "bogus"]},
        )
        assert response.status_code == 200
        assert response.json()["category_ids"] == [c1]

    def test_all_unknown_categories(self, auth_client: TestClient) -> None:
        """An update naming only unknown categories fails."""
        product = create_product(auth_client)
        response = auth_client.put(f"/api/products/{product['id']}", json={"category_ids": ["bogus"]})
        assert response.status_code == 400
        assert response.json()["error_code"] == "NO_VALID_CATEGORIES"

    def test_status_untouched_when_absent(self, auth_client: TestClient) -> None:
        """Omitting status keeps it."""
        product = create_product(auth_client, status="inactive")
        response = auth_client.put(f"/api/products/{product['id']}", json={"color": "Grey"})
        assert response.json()["status"] == "inactive"
        assert response.json()["color"] == "Grey"

    def test_unknown_product(self, auth_client: TestClient) -> None:
        """Updating a missing product is 404."""
        assert auth_client.put("/api/products/missing", json={"name": "X"}).status_code == 404


class TestDeleteProduct:
    """Tests for DELETE /api/products/{id}."""

    def test_delete(self, auth_client: TestClient) -> None:
        """Deleted products are gone."""
        product = create_product(auth_client)
        response = auth_client.delete(f"/api/products/{product['id']}")
        assert response.status_code == 200
        assert response.json()["product_id"] == product["id"]
        assert auth_client.get(f"/api/products/{product['id']}").status_code == 404


class TestProductCategoryLinks:
    """Tests for linking and unlinking categories."""

    def test_round_trip(self, auth_client: TestClient) -> None:
        """Link then unlink restores the original categories."""
        c1 = create_category(auth_client, "C1")
        c2 = create_category(auth_client, "C2")
        product = create_product(auth_client, category_ids=[c1])
        url = f"/api/products/{product['id']}/categories/{c2}"

        response = auth_client.post(url)
        assert response.json()["category_ids"] == [c1, c2]
        assert auth_client.post(url).status_code == 409

        response = auth_client.delete(url)
        assert response.json()["category_ids"] == [c1]
        response = auth_client.delete(url)
        assert response.status_code == 409
        assert response.json()["error_code"] == "NOT_LINKED"

    def test_link_unknown_category(self, auth_client: TestClient) -> None:
        """Linking a missing category is 404."""
        product = create_product(auth_client)
        response = auth_client.post(f"/api/products/{product['id']}/categories/missing")
        assert response.status_code == 404
        assert response.json()["error_code"] == "CATEGORY_NOT_FOUND"

    def test_requires_auth(self, client: TestClient) -> None:
        """Anonymous callers cannot link."""
        assert client.post("/api/products/p/categories/c").status_code == 401
