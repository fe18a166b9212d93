"""
SPA Images Backend: HTTP API Tests
===================================

What:  End-to-end tests of the /images surface through the ASGI app.
How:   HTTPX AsyncClient over ASGITransport against the SQLite test schema.

What we test:
    ✅ Status codes and bodies for every route
    ✅ CORS headers on every response; OPTIONS → 204 on any path
    ✅ Malformed JSON behaves like an empty object
    ✅ Unknown routes and unknown ids → 404 with empty body
    ✅ Health check
"""

import json

import pytest

from spa_images.middleware.cors import CORS_HEADERS
from spa_images.services.validation import (
    DESCRIPTION_TOO_LONG,
    IMAGE_URL_INVALID,
    IMAGE_URL_REQUIRED,
    RATING_INVALID,
    RATING_REQUIRED,
)


def assert_cors(response):
    for name, value in CORS_HEADERS.items():
        assert response.headers[name] == value


async def create(client, payload):
    response = await client.post("/images", json=payload)
    assert response.status_code == 201
    listed = (await client.get("/images")).json()
    return max(item["id"] for item in listed)


class TestListImages:

    @pytest.mark.asyncio
    async def test_empty_list(self, test_client):
        response = await test_client.get("/images")

        assert response.status_code == 200
        assert response.json() == []
        assert response.headers["content-type"].startswith("application/json")
        assert_cors(response)

    @pytest.mark.asyncio
    async def test_list_is_ordered_by_position_then_newest(self, test_client):
        first = await create(test_client, {"image_url": "https://x/1", "rating": 1, "position": 2})
        second = await create(test_client, {"image_url": "https://x/2", "rating": 2, "position": 1})
        third = await create(test_client, {"image_url": "https://x/3", "rating": 3, "position": 1})

        listed = (await test_client.get("/images")).json()

        assert [item["id"] for item in listed] == [third, second, first]
        assert set(listed[0]) == {"id", "image_url", "description", "rating", "position"}

    @pytest.mark.asyncio
    async def test_query_string_is_ignored_by_routing(self, test_client):
        response = await test_client.get("/images?sort=rating")
        assert response.status_code == 200


class TestCreateImage:

    @pytest.mark.asyncio
    async def test_create_valid_image(self, test_client, valid_payload):
        response = await test_client.post("/images", json=valid_payload)

        assert response.status_code == 201
        assert response.json() == {"ok": True}
        assert_cors(response)

    @pytest.mark.asyncio
    async def test_create_invalid_image_lists_every_error(self, test_client):
        response = await test_client.post(
            "/images",
            json={"image_url": "ftp://x", "rating": 8, "description": "d" * 201},
        )

        assert response.status_code == 400
        assert response.json() == {
            "errori": [IMAGE_URL_INVALID, RATING_INVALID, DESCRIPTION_TOO_LONG]
        }
        assert_cors(response)
        assert (await test_client.get("/images")).json() == []

    @pytest.mark.asyncio
    async def test_malformed_json_is_treated_as_empty_object(self, test_client):
        malformed = await test_client.post(
            "/images",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        empty = await test_client.post("/images", json={})

        assert malformed.status_code == 400
        assert malformed.json() == empty.json()
        assert malformed.json() == {"errori": [IMAGE_URL_REQUIRED, RATING_REQUIRED]}

    @pytest.mark.asyncio
    async def test_empty_body(self, test_client):
        response = await test_client.post("/images")
        assert response.status_code == 400
        assert response.json() == {"errori": [IMAGE_URL_REQUIRED, RATING_REQUIRED]}

    @pytest.mark.asyncio
    async def test_multibyte_characters_survive(self, test_client):
        payload = {"image_url": "https://x/è.png", "rating": 5, "description": "caffè ☕ città"}
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")

        response = await test_client.post(
            "/images", content=body, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 201
        [stored] = (await test_client.get("/images")).json()
        assert stored["description"] == "caffè ☕ città"

    @pytest.mark.asyncio
    async def test_storage_failure_is_a_400_with_generic_message(self, test_client):
        response = await test_client.post(
            "/images",
            json={"image_url": "https://x", "rating": 3, "position": "top"},
        )

        assert response.status_code == 400
        errors = response.json()["errori"]
        assert len(errors) == 1
        assert "database" in errors[0]


class TestGetImage:

    @pytest.mark.asyncio
    async def test_round_trip(self, test_client, valid_payload):
        image_id = await create(test_client, valid_payload)

        response = await test_client.get(f"/images/{image_id}")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == image_id
        assert body["image_url"] == valid_payload["image_url"]
        assert body["description"] == valid_payload["description"]
        assert body["rating"] == valid_payload["rating"]
        assert body["position"] == 0

    @pytest.mark.asyncio
    async def test_unknown_id(self, test_client):
        response = await test_client.get("/images/4242")

        assert response.status_code == 404
        assert response.content == b""
        assert_cors(response)

    @pytest.mark.asyncio
    async def test_non_numeric_id(self, test_client):
        response = await test_client.get("/images/abc")
        assert response.status_code == 404
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_id_with_trailing_characters_is_parsed_leniently(self, test_client, valid_payload):
        image_id = await create(test_client, valid_payload)

        response = await test_client.get(f"/images/{image_id}abc")

        assert response.status_code == 200
        assert response.json()["id"] == image_id


class TestUpdateImage:

    @pytest.mark.asyncio
    async def test_update_existing(self, test_client, valid_payload):
        image_id = await create(test_client, valid_payload)

        response = await test_client.put(
            f"/images/{image_id}",
            json={"image_url": "data:image/gif;base64,R0lGOD", "rating": "2", "position": 9},
        )

        assert response.status_code == 204
        assert response.content == b""
        assert_cors(response)

        body = (await test_client.get(f"/images/{image_id}")).json()
        assert body["image_url"] == "data:image/gif;base64,R0lGOD"
        assert body["rating"] == 2
        assert body["description"] is None
        assert body["position"] == 9

    @pytest.mark.asyncio
    async def test_update_invalid_payload(self, test_client, valid_payload):
        image_id = await create(test_client, valid_payload)

        response = await test_client.put(f"/images/{image_id}", json={"image_url": "x"})

        assert response.status_code == 400
        assert response.json() == {"errori": [IMAGE_URL_INVALID, RATING_REQUIRED]}

    @pytest.mark.asyncio
    async def test_validation_runs_before_lookup(self, test_client):
        response = await test_client.put("/images/999", json={})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, test_client, valid_payload):
        response = await test_client.put("/images/999", json=valid_payload)

        assert response.status_code == 404
        assert response.content == b""


class TestDeleteImage:

    @pytest.mark.asyncio
    async def test_delete_existing(self, test_client, valid_payload):
        image_id = await create(test_client, valid_payload)

        response = await test_client.delete(f"/images/{image_id}")

        assert response.status_code == 204
        assert response.content == b""
        assert (await test_client.get(f"/images/{image_id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_unknown_id_is_404(self, test_client):
        response = await test_client.delete("/images/31337")

        assert response.status_code == 404
        assert response.content == b""
        assert_cors(response)

    @pytest.mark.asyncio
    async def test_delete_non_numeric_id_is_404(self, test_client):
        response = await test_client.delete("/images/nope")
        assert response.status_code == 404


class TestRoutingAndCors:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/images", "/images/5", "/anything/at/all", "/"])
    async def test_options_on_any_path(self, test_client, path):
        response = await test_client.options(path)

        assert response.status_code == 204
        assert response.content == b""
        assert_cors(response)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path",
        [
            ("GET", "/"),
            ("GET", "/photos"),
            ("GET", "/images/1/extra"),
            ("GET", "/images/"),
            ("DELETE", "/images"),
            ("PUT", "/images"),
            ("PATCH", "/images/1"),
            ("POST", "/images/1"),
            ("TRACE", "/images"),
            ("FOO", "/images"),
            ("FOO", "/health"),
        ],
    )
    async def test_unmatched_routes_are_404(self, test_client, method, path):
        response = await test_client.request(method, path)

        assert response.status_code == 404
        assert response.content == b""
        assert response.headers["content-type"].startswith("application/json")
        assert_cors(response)

    @pytest.mark.asyncio
    async def test_encoded_slash_is_not_a_segment_separator(self, test_client, valid_payload):
        image_id = await create(test_client, valid_payload)

        response = await test_client.get(f"/images%2F{image_id}")

        assert response.status_code == 404
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/images", headers={"X-Request-ID": "abc12345"})
        assert response.headers["X-Request-ID"] == "abc12345"


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_reports_database(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert_cors(response)
