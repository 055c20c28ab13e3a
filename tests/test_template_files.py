import base64
import json

from design_center.core.config import get_settings

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
    b"\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N\x00"
    b"\x00\x00\x00IEND\xaeB`\x82"
)


def create_template(client, headers, **payload):
    payload.setdefault("type", "square-post")
    response = client.post("/api/templates", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def save_design(client, headers, document):
    response = client.post("/api/templates/save-design", headers=headers, json={"design_data": document})
    assert response.status_code == 200, response.text
    return response.json()


def test_upload_image_stores_file_under_images(client, headers, uploads_root):
    response = client.post(
        "/api/templates/upload-image",
        headers=headers,
        files={"image": ("logo.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 200
    stored = response.json()["file"]
    assert stored["filename"].startswith("img-")
    assert stored["filename"].endswith(".png")
    assert stored["original_name"] == "logo.png"
    assert stored["size"] == len(PNG_BYTES)
    assert stored["path"] == f"/uploads/images/{stored['filename']}"
    assert (uploads_root / "images" / stored["filename"]).read_bytes() == PNG_BYTES

    served = client.get(stored["path"])
    assert served.status_code == 200
    assert served.content == PNG_BYTES


def test_upload_image_rejects_non_images(client, headers):
    response = client.post(
        "/api/templates/upload-image",
        headers=headers,
        files={"image": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400


def test_upload_image_enforces_size_limit(client, headers, monkeypatch):
    monkeypatch.setenv("MAX_IMAGE_UPLOAD_MB", "1")
    get_settings.cache_clear()

    response = client.post(
        "/api/templates/upload-image",
        headers=headers,
        files={"image": ("big.png", b"0" * (1024 * 1024 + 1), "image/png")},
    )

    assert response.status_code == 413


def test_upload_requires_auth(client):
    response = client.post(
        "/api/templates/upload-image",
        files={"image": ("logo.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 401


def test_upload_file_keeps_original_stem(client, headers, uploads_root):
    response = client.post(
        "/api/templates/upload-file",
        headers=headers,
        files={"file": ("report.pdf", b"%PDF-1.4", "application/pdf")},
    )

    assert response.status_code == 200
    stored = response.json()["file"]
    assert stored["filename"].startswith("report-")
    assert stored["filename"].endswith(".pdf")
    assert (uploads_root / "files" / stored["filename"]).exists()


def test_upload_file_rejects_disallowed_types(client, headers):
    response = client.post(
        "/api/templates/upload-file",
        headers=headers,
        files={"file": ("setup.exe", b"MZ", "application/x-msdownload")},
    )

    assert response.status_code == 400


def test_upload_multiple_files(client, headers):
    response = client.post(
        "/api/templates/upload-multiple",
        headers=headers,
        files=[
            ("files", ("a.txt", b"first", "text/plain")),
            ("files", ("b.csv.zip", b"PK", "application/zip")),
        ],
    )

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert {f["original_name"] for f in body["files"]} == {"a.txt", "b.csv.zip"}


def test_upload_multiple_rejects_bad_member(client, headers, uploads_root):
    response = client.post(
        "/api/templates/upload-multiple",
        headers=headers,
        files=[
            ("files", ("a.txt", b"first", "text/plain")),
            ("files", ("run.sh", b"#!/bin/sh", "application/x-sh")),
        ],
    )

    assert response.status_code == 400
    assert list((uploads_root / "files").iterdir()) == []


def test_upload_multiple_rejects_more_than_ten_files(client, headers, uploads_root):
    files = [("files", (f"note-{i}.txt", b"x", "text/plain")) for i in range(11)]

    response = client.post("/api/templates/upload-multiple", headers=headers, files=files)

    assert response.status_code == 400
    assert list((uploads_root / "files").iterdir()) == []


def test_upload_multiple_accepts_ten_files(client, headers):
    files = [("files", (f"note-{i}.txt", b"x", "text/plain")) for i in range(10)]

    response = client.post("/api/templates/upload-multiple", headers=headers, files=files)

    assert response.status_code == 200
    assert response.json()["count"] == 10


def test_upload_multiple_oversized_member_writes_nothing(client, headers, uploads_root, monkeypatch):
    monkeypatch.setenv("MAX_FILE_UPLOAD_MB", "1")
    get_settings.cache_clear()

    response = client.post(
        "/api/templates/upload-multiple",
        headers=headers,
        files=[
            ("files", ("small.txt", b"ok", "text/plain")),
            ("files", ("big.txt", b"0" * (1024 * 1024 + 1), "text/plain")),
        ],
    )

    assert response.status_code == 413
    assert list((uploads_root / "files").iterdir()) == []


def test_upload_file_keeps_inner_double_dots(client, headers, uploads_root):
    response = client.post(
        "/api/templates/upload-file",
        headers=headers,
        files={"file": ("Q1..report.pdf", b"%PDF-1.4", "application/pdf")},
    )

    assert response.status_code == 200
    stored = response.json()["file"]
    assert stored["filename"].startswith("Q1..report-")
    assert (uploads_root / "files" / stored["filename"]).exists()


def test_list_files_groups_by_kind(client, headers):
    client.post(
        "/api/templates/upload-image",
        headers=headers,
        files={"image": ("logo.png", PNG_BYTES, "image/png")},
    )
    save_design(client, headers, {"objects": []})

    listing = client.get("/api/templates/files").json()["data"]

    assert len(listing["images"]) == 1
    assert len(listing["designs"]) == 1
    assert listing["files"] == []
    assert listing["total"] == 2
    assert listing["designs"][0]["path"].startswith("/uploads/designs/design-")


def test_delete_file_by_kind(client, headers, uploads_root):
    stored = client.post(
        "/api/templates/upload-image",
        headers=headers,
        files={"image": ("logo.png", PNG_BYTES, "image/png")},
    ).json()["file"]

    deleted = client.delete(
        f"/api/templates/file/{stored['filename']}", headers=headers, params={"type": "images"}
    )
    again = client.delete(
        f"/api/templates/file/{stored['filename']}", headers=headers, params={"type": "images"}
    )

    assert deleted.status_code == 200
    assert deleted.json()["filename"] == stored["filename"]
    assert not (uploads_root / "images" / stored["filename"]).exists()
    assert again.status_code == 404


def test_delete_file_rejects_traversal(client, headers):
    response = client.delete("/api/templates/file/..%5Csecret", headers=headers)

    assert response.status_code == 400


def test_save_design_json_body_and_read_back(client, headers):
    document = {"objects": [{"id": "1", "type": "text"}], "background": "#fff"}

    saved = save_design(client, headers, document)

    assert saved["filename"].startswith("design-")
    assert saved["path"] == f"/uploads/designs/{saved['filename']}"
    assert saved["size"] > 0
    by_path = client.get(f"/api/templates/design/{saved['filename']}")
    by_query = client.get("/api/templates/design", params={"filename": saved["filename"]})
    assert by_path.json() == {"filename": saved["filename"], "data": document}
    assert by_query.json()["data"] == document


def test_save_design_with_requested_filename(client, headers, uploads_root):
    response = client.post(
        "/api/templates/save-design",
        headers=headers,
        json={"design_data": {"a": 1}, "filename": "listing.json"},
    )

    assert response.status_code == 200
    assert json.loads((uploads_root / "designs" / "listing.json").read_text()) == {"a": 1}


def test_save_design_multipart(client, headers):
    response = client.post(
        "/api/templates/save-design",
        headers=headers,
        files={"designData": ("design.json", json.dumps({"pages": 2}).encode(), "application/json")},
    )

    assert response.status_code == 200
    filename = response.json()["filename"]
    assert client.get(f"/api/templates/design/{filename}").json()["data"] == {"pages": 2}


def test_save_design_rejects_missing_or_invalid_data(client, headers):
    empty_body = client.post("/api/templates/save-design", headers=headers, json={})
    not_json = client.post(
        "/api/templates/save-design",
        headers=headers,
        files={"designData": ("notes.txt", b"plain", "text/plain")},
    )
    broken_json = client.post(
        "/api/templates/save-design",
        headers=headers,
        files={"designData": ("design.json", b"{not json", "application/json")},
    )

    assert empty_body.status_code == 400
    assert not_json.status_code == 400
    assert broken_json.status_code == 400


def test_design_read_errors(client):
    assert client.get("/api/templates/design").status_code == 400
    assert client.get("/api/templates/design/design-missing.json").status_code == 404


def test_save_design_large(client, headers):
    document = {"objects": [{"id": str(i), "text": "x" * 100} for i in range(200)]}

    response = client.post("/api/templates/save-design-large", headers=headers, json={"design_data": document})

    assert response.status_code == 200
    body = response.json()
    assert body["filename"].startswith("design-large-")
    assert body["size"] > 20000


def test_save_thumbnail_for_template(client, headers, uploads_root):
    template = create_template(client, headers)
    data_url = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()

    response = client.post(
        "/api/templates/save-thumbnail",
        headers=headers,
        json={"template_id": template["id"], "thumbnail_data": data_url},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["thumbnail"] == f"/uploads/thumbnails/{body['filename']}"
    assert (uploads_root / "thumbnails" / body["filename"]).read_bytes() == PNG_BYTES
    refreshed = client.get(f"/api/templates/{template['id']}").json()["data"]
    assert refreshed["thumbnail"] == body["thumbnail"]

    served = client.get(f"/api/templates/thumbnail/{body['filename']}")
    assert served.status_code == 200
    assert served.headers["cache-control"] == "public, max-age=3600"
    assert served.content == PNG_BYTES


def test_save_thumbnail_replaces_previous_file(client, headers, uploads_root):
    template = create_template(client, headers)
    payload = {"template_key": template["template_key"], "thumbnail_data": base64.b64encode(PNG_BYTES).decode()}

    first = client.post("/api/templates/save-thumbnail", headers=headers, json=payload).json()
    second = client.post("/api/templates/save-thumbnail", headers=headers, json=payload).json()

    if first["filename"] != second["filename"]:
        assert not (uploads_root / "thumbnails" / first["filename"]).exists()
    assert (uploads_root / "thumbnails" / second["filename"]).exists()


def test_save_thumbnail_without_template(client, headers):
    response = client.post(
        "/api/templates/save-thumbnail",
        headers=headers,
        json={"thumbnail_data": base64.b64encode(PNG_BYTES).decode()},
    )

    assert response.status_code == 200
    assert response.json()["filename"].startswith("thumbnail-temp-")


def test_save_thumbnail_validation(client, headers):
    missing = client.post("/api/templates/save-thumbnail", headers=headers, json={})
    invalid = client.post(
        "/api/templates/save-thumbnail", headers=headers, json={"thumbnail_data": "!!!not-base64"}
    )
    unknown_template = client.post(
        "/api/templates/save-thumbnail",
        headers=headers,
        json={"template_key": "template_0_nothing", "thumbnail_data": base64.b64encode(PNG_BYTES).decode()},
    )

    assert missing.status_code == 400
    assert invalid.status_code == 400
    assert unknown_template.status_code == 404


def test_missing_thumbnail_returns_404(client):
    assert client.get("/api/templates/thumbnail/thumb-none.png").status_code == 404


def test_upload_thumbnail_for_template(client, headers, uploads_root):
    template = create_template(client, headers)

    response = client.post(
        f"/api/templates/{template['id']}/thumbnail",
        headers=headers,
        files={"thumbnail": ("thumb.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 200
    thumbnail = response.json()["data"]["thumbnail"]
    assert thumbnail.startswith("/uploads/thumbnails/thumb-")
    assert (uploads_root / "thumbnails" / thumbnail.rsplit("/", 1)[1]).exists()


def test_replacing_design_filename_removes_old_file(client, headers, uploads_root):
    template = create_template(client, headers)
    old = save_design(client, headers, {"v": 1})["filename"]
    new = save_design(client, headers, {"v": 2})["filename"]

    client.put(f"/api/templates/{template['id']}", headers=headers, json={"design_filename": old})
    client.put(f"/api/templates/{template['id']}", headers=headers, json={"design_filename": new})

    assert not (uploads_root / "designs" / old).exists()
    assert (uploads_root / "designs" / new).exists()


def test_cleanup_orphaned_design_files(client, headers, uploads_root):
    template = create_template(client, headers)
    kept = save_design(client, headers, {"v": 1})["filename"]
    orphan = save_design(client, headers, {"v": 2})["filename"]
    client.put(f"/api/templates/{template['id']}", headers=headers, json={"design_filename": kept})

    response = client.post("/api/templates/cleanup-orphaned-files", headers=headers)

    assert response.status_code == 200
    assert response.json()["removed"] == [orphan]
    assert response.json()["count"] == 1
    assert (uploads_root / "designs" / kept).exists()
    assert not (uploads_root / "designs" / orphan).exists()


def test_deleting_template_removes_its_files(client, headers, uploads_root):
    template = create_template(client, headers)
    design = save_design(client, headers, {"v": 1})["filename"]
    client.put(f"/api/templates/{template['id']}", headers=headers, json={"design_filename": design})
    thumb = client.post(
        f"/api/templates/{template['id']}/thumbnail",
        headers=headers,
        files={"thumbnail": ("thumb.png", PNG_BYTES, "image/png")},
    ).json()["data"]["thumbnail"]

    client.delete(f"/api/templates/{template['id']}", headers=headers)

    assert not (uploads_root / "designs" / design).exists()
    assert not (uploads_root / "thumbnails" / thumb.rsplit("/", 1)[1]).exists()


def test_duplicate_copies_design_and_thumbnail(client, headers, uploads_root):
    template = create_template(client, headers)
    design = save_design(client, headers, {"v": 1})["filename"]
    client.put(f"/api/templates/{template['id']}", headers=headers, json={"design_filename": design})

    duplicate = client.post(f"/api/templates/{template['id']}/duplicate", headers=headers).json()["data"]

    assert duplicate["design_filename"] != design
    assert json.loads((uploads_root / "designs" / duplicate["design_filename"]).read_text()) == {"v": 1}
    assert duplicate["thumbnail"] == "/uploads/default-thumbnail.png"
