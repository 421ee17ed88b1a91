import base64
import struct
import zlib
from io import BytesIO

import pytest
from PIL import Image


def png_data_url(size=(16, 12)):
    buffer = BytesIO()
    Image.new("RGB", size, (200, 40, 90)).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def oversized_png_data_url(width=20000, height=20000):
    """A valid PNG header declaring far more pixels than Pillow will open."""

    def chunk(kind, data):
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF)

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    binary = b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IDAT", zlib.compress(b"")) + chunk(b"IEND", b"")
    return "data:image/png;base64," + base64.b64encode(binary).decode("ascii")


def cake_payload(**overrides):
    payload = {
        "name": "Meera",
        "phone": "9123456780",
        "price": 4520,
        "referenceImage": None,
        "weightKg": 4,
        "icing": "Fondant",
        "flavour": "Chocolate",
        "cakeType": "Theme Cake",
        "shape": "Heart",
        "message": "Happy Birthday Anu",
        "withEgg": False,
        "photoCount": 1,
        "toys": {"Edible Toys": 6},
        "flowers": 2,
        "deliveryTimestamp": "2025-02-14T10:30:00Z",
        "chefNotes": "Use pastel pink for the border",
    }
    payload.update(overrides)
    return payload


def test_create_and_fetch_configuration(client):
    r = client.post("/api/cakes", json=cake_payload())
    assert r.status_code == 201
    cake_id = r.get_json()["id"]

    fetched = client.get(f"/api/cakes?id={cake_id}")
    assert fetched.status_code == 200
    data = fetched.get_json()
    assert data["id"] == cake_id
    assert data["total_price"] == 4520.0
    assert data["delivery_time"] == "2025-02-14T10:30:00Z"
    assert data["reference_image_url"] is None
    assert data["customization"] == {
        "weightKg": 4.0,
        "icing": "Fondant",
        "flavour": "Chocolate",
        "cakeType": "Theme Cake",
        "shape": "Heart",
        "message": "Happy Birthday Anu",
        "withEgg": False,
        "photoCount": 1,
        "toys": {"Edible Toys": 6},
        "flowers": 2,
    }


def test_chef_notes_only_in_staff_view(client):
    cake_id = client.post("/api/cakes", json=cake_payload()).get_json()["id"]
    staff = client.get(f"/api/cakes?id={cake_id}&view=staff").get_json()
    assert staff["customization"]["chef_notes"] == "Use pastel pink for the border"


def test_update_configuration_by_id(client):
    cake_id = client.post("/api/cakes", json=cake_payload()).get_json()["id"]

    r = client.put(f"/api/cakes?id={cake_id}", json=cake_payload(price=5000, weightKg=5, message="Congrats"))
    assert r.status_code == 200
    assert r.get_json() == {"id": cake_id}

    data = client.get(f"/api/cakes?id={cake_id}").get_json()
    assert data["total_price"] == 5000.0
    assert data["customization"]["weightKg"] == 5.0
    assert data["customization"]["message"] == "Congrats"


def test_client_price_is_stored_as_submitted(client):
    cake_id = client.post("/api/cakes", json=cake_payload(price=1)).get_json()["id"]
    assert client.get(f"/api/cakes?id={cake_id}").get_json()["total_price"] == 1.0


def test_update_and_fetch_errors(client):
    assert client.put("/api/cakes", json=cake_payload()).get_json() == {"error": "Missing configuration ID for update."}
    missing = client.put("/api/cakes?id=nope", json=cake_payload())
    assert missing.status_code == 404
    assert missing.get_json() == {"error": "Configuration not found."}
    assert client.get("/api/cakes").status_code == 400
    assert client.get("/api/cakes?id=nope").status_code == 404


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"message": "x" * 41}, "message must be at most 40 characters"),
        ({"chefNotes": "x" * 201}, "chefNotes must be at most 200 characters"),
        ({"phone": "98765"}, "phone must be 10 digits"),
        ({"deliveryTimestamp": None}, "deliveryTimestamp is required"),
        ({"deliveryTimestamp": "tomorrow"}, "deliveryTimestamp must be an ISO 8601 timestamp"),
        ({"price": None}, "price is required"),
        ({"toys": {"Edible Toys": -2}}, "count for Edible Toys must be >= 0"),
        ({"weightKg": "heavy"}, "weightKg must be a number"),
    ],
)
def test_configuration_validation(client, overrides, message):
    r = client.post("/api/cakes", json=cake_payload(**overrides))
    assert r.status_code == 400
    assert r.get_json() == {"error": message}


def test_reference_image_is_uploaded_on_save(client, config):
    cake_id = client.post("/api/cakes", json=cake_payload(referenceImage=png_data_url())).get_json()["id"]
    url = client.get(f"/api/cakes?id={cake_id}").get_json()["reference_image_url"]

    assert url.startswith("http://testserver/uploads/")
    filename = url.rsplit("/", 1)[-1]
    assert (config.upload_dir / filename).exists()
    assert client.get(f"/uploads/{filename}").status_code == 200


def test_broken_reference_image_does_not_block_save(client):
    r = client.post("/api/cakes", json=cake_payload(referenceImage="data:image/png;base64,bm90IGFuIGltYWdl"))
    assert r.status_code == 201
    assert client.get(f"/api/cakes?id={r.get_json()['id']}").get_json()["reference_image_url"] is None


def test_existing_reference_url_is_kept(client):
    url = "https://cdn.example.com/cake.jpg"
    cake_id = client.post("/api/cakes", json=cake_payload(referenceImage=url)).get_json()["id"]
    assert client.get(f"/api/cakes?id={cake_id}").get_json()["reference_image_url"] == url


def test_quote_uses_seeded_options_and_rules(client):
    r = client.post("/api/cakes/quote", json=cake_payload())
    assert r.status_code == 200
    quote = r.get_json()
    assert quote["breakdown"] == [
        {"label": "Chocolate Flavour (4kg)", "price": 2400.0},
        {"label": "Eggless Charge (4kg)", "price": 400.0},
        {"label": "Shape (Heart)", "price": 150.0},
        {"label": "Cake Style (Theme Cake)", "price": 300.0},
        {"label": "Icing (Fondant 2-4kg)", "price": 800.0},
        {"label": "Photo Cake (1 photos)", "price": 250.0},
        {"label": "Flowers (2 units)", "price": 100.0},
        {"label": "Edible Toys (6 units, 5 FREE)", "price": 120.0},
    ]
    assert quote["total"] == 4520.0
    assert quote["notices"] == []


def test_quote_reports_gating_notices(client):
    quote = client.post("/api/cakes/quote", json={"weightKg": 1, "icing": "Fondant", "flavour": "Vanilla"}).get_json()
    assert "Fondant icing requires a minimum weight of 1.5kg." in quote["notices"]
    assert quote["total"] == 900.0


def test_quote_rejects_unknown_toys_and_bad_flags(client):
    unknown = client.post("/api/cakes/quote", json={"weightKg": 2, "toys": {"Dragon": 1}})
    assert unknown.status_code == 400
    assert unknown.get_json() == {"error": "unknown toy: Dragon"}
    bad_flag = client.post("/api/cakes/quote", json={"weightKg": 2, "withEgg": "no"})
    assert bad_flag.status_code == 400
    assert client.post("/api/cakes/quote", json=[1, 2]).status_code == 400


def test_options_endpoint(client):
    data = client.get("/api/cakes/options").get_json()
    assert {"option_type": "toy", "option_name": "Edible Toys", "base_price": 120.0} in data["options"]["toy"]
    assert {"rule_name": "Eggless", "price": 100.0} in data["rules"]


def test_menu_grouped_by_category(client):
    menu = client.get("/api/menu").get_json()
    assert sorted(menu) == ["Fried Rice", "Noodles", "Pizza", "Shakes & Mojitos"]
    assert [it["name"] for it in menu["Fried Rice"]] == ["Chicken Fried Rice", "Veg Fried Rice"]
    rice = menu["Fried Rice"][1]
    assert rice["price"] == 140.0
    assert rice["parcel"] == 10.0
    assert rice["image_url"] == "/logo.png"


def test_active_offers(client):
    offers = client.get("/api/offers").get_json()
    assert [o["title"] for o in offers] == ["Free edible toys"]


def test_upload_endpoint(client, config):
    r = client.post("/api/upload", json={"dataUrl": png_data_url((2400, 600))})
    assert r.status_code == 200
    filename = r.get_json()["url"].rsplit("/", 1)[-1]
    with Image.open(config.upload_dir / filename) as stored:
        assert stored.format == "JPEG"
        assert max(stored.size) == 1200


@pytest.mark.parametrize(
    "body, message",
    [
        ({}, "No image data provided"),
        ({"dataUrl": "hello"}, "No image data provided"),
        ({"dataUrl": "data:image/png;base64,@@@"}, "Image data is not valid base64."),
    ],
)
def test_upload_rejects_bad_payloads(client, body, message):
    r = client.post("/api/upload", json=body)
    assert r.status_code == 400
    assert r.get_json() == {"error": message}


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.get_data(as_text=True) == "OK"


def test_oversized_reference_image_does_not_block_save(client, config):
    r = client.post("/api/cakes", json=cake_payload(referenceImage=oversized_png_data_url()))
    assert r.status_code == 201
    assert client.get(f"/api/cakes?id={r.get_json()['id']}").get_json()["reference_image_url"] is None
    assert list(config.upload_dir.iterdir()) == []


def test_upload_rejects_oversized_images(client):
    r = client.post("/api/upload", json={"dataUrl": oversized_png_data_url()})
    assert r.status_code == 400
    assert r.get_json() == {"error": "Image dimensions are too large."}


def test_rejected_save_stores_no_image(client, config):
    invalid = client.post("/api/cakes", json=cake_payload(referenceImage=png_data_url(), deliveryTimestamp="tomorrow"))
    assert invalid.status_code == 400

    unknown = client.put("/api/cakes?id=nope", json=cake_payload(referenceImage=png_data_url()))
    assert unknown.status_code == 404

    assert list(config.upload_dir.iterdir()) == []


@pytest.mark.parametrize(
    "body, message",
    [
        ('{"weightKg": "1e30", "flavour": "Vanilla"}', "weightKg must be <= 1000"),
        ('{"weightKg": 2, "toys": {"Edible Toys": Infinity}}', "count for Edible Toys must be a whole number"),
        ('{"weightKg": 2, "toys": {"Edible Toys": 5000}}', "count for Edible Toys must be <= 1000"),
        ('{"weightKg": 2, "photoCount": 1e300}', "photoCount must be <= 1000"),
        ('{"weightKg": 2, "flowers": 1001}', "flowers must be <= 1000"),
    ],
)
def test_quote_rejects_out_of_range_values(client, body, message):
    r = client.post("/api/cakes/quote", data=body, content_type="application/json")
    assert r.status_code == 400
    assert r.get_json() == {"error": message}


def test_largest_accepted_weight_is_priced(client):
    r = client.post("/api/cakes/quote", json={"weightKg": 1000, "flavour": "Vanilla"})
    assert r.status_code == 200
    assert r.get_json()["total"] == 500000.0
