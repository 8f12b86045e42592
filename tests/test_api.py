from __future__ import annotations

import io
import zipfile

import pytest
from fastapi.testclient import TestClient

from beadchart.api.palettes import get_palette_store
from beadchart.core.palettes import PaletteStore
from beadchart.core.sessions import store as session_store
from beadchart.export.tiling import ExportTileSpec
from beadchart.main import app
from tests.utils import BLUE, RED, WHITE, make_palette, make_pattern, uniform_pattern


@pytest.fixture
def palettes():
    return PaletteStore(builtins=[make_palette()], clock=lambda: 1_700_000_000.0)


@pytest.fixture
def client(palettes):
    app.dependency_overrides[get_palette_store] = lambda: palettes
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create(client, pattern, **extra):
    response = client.post("/api/v1/patterns", json={"pattern": pattern.model_dump(mode="json"), **extra})
    assert response.status_code == 200, response.text
    return response.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_create_and_fetch_session(client):
    summary = create(client, make_pattern(4, 3), title="Fox")
    assert summary["width"] == 4 and summary["height"] == 3
    assert summary["palette_id"] == "test"
    assert sum(summary["counts"].values()) == 12

    fetched = client.get(f"/api/v1/patterns/{summary['session_id']}").json()
    assert fetched["session_id"] == summary["session_id"]


def test_create_rejects_inconsistent_counts(client):
    pattern = uniform_pattern(2, 2).model_dump(mode="json")
    pattern["counts"] = {RED.id: 3}
    response = client.post("/api/v1/patterns", json={"pattern": pattern})
    assert response.status_code == 422


def test_unknown_session(client):
    assert client.get("/api/v1/patterns/nope").status_code == 404
    assert client.post("/api/v1/patterns/nope/undo").status_code == 404


def test_preview_and_full_export(client):
    session_id = create(client, make_pattern(4, 3))["session_id"]
    preview = client.get(f"/api/v1/patterns/{session_id}/preview", params={"shape_mode": "square"})
    assert preview.headers["content-type"] == "image/png"

    export = client.get(f"/api/v1/patterns/{session_id}/export")
    assert export.status_code == 200
    assert 'filename="pattern_w4_h3.png"' in export.headers["content-disposition"]


def test_tile_export_zip_and_pdf(client):
    session_id = create(client, make_pattern(5, 4))["session_id"]
    client.patch(f"/api/v1/patterns/{session_id}/preferences", json={"show_id_labels": False})

    response = client.post(f"/api/v1/patterns/{session_id}/export/tiles", json={"chunk_width": 3, "chunk_height": 3})
    assert response.status_code == 200
    assert 'filename="pattern-split.zip"' in response.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        assert archive.namelist() == [
            "pattern_row1_col1.png",
            "pattern_row1_col2.png",
            "pattern_row2_col1.png",
            "pattern_row2_col2.png",
            "materials_5x4.png",
        ]

    pdf = client.post(
        f"/api/v1/patterns/{session_id}/export/tiles",
        json={"chunk_width": 3, "chunk_height": 3, "format": "pdf", "include_materials": False},
    )
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")


def test_invalid_tile_size_is_a_client_error(client):
    session_id = create(client, make_pattern(2, 2))["session_id"]
    response = client.post(f"/api/v1/patterns/{session_id}/export/tiles", json={"chunk_width": 0})
    assert response.status_code == 400
    assert session_store.get(session_id).session.tile_spec == ExportTileSpec()

    ok = client.post(f"/api/v1/patterns/{session_id}/export/tiles", json={"chunk_width": 1, "chunk_height": 2})
    assert ok.status_code == 200
    assert session_store.get(session_id).session.tile_spec == ExportTileSpec(chunk_width=1, chunk_height=2)


def test_preferences_reject_unknown_fields(client):
    session_id = create(client, make_pattern(2, 2))["session_id"]
    response = client.patch(f"/api/v1/patterns/{session_id}/preferences", json={"colour": "red"})
    assert response.status_code == 422


def test_hidden_colours_and_materials(client):
    session_id = create(client, uniform_pattern(3, 3, RED))["session_id"]
    url = f"/api/v1/patterns/{session_id}"
    assert client.get(f"{url}/materials").status_code == 200

    hidden = client.post(f"{url}/hidden/{RED.id}").json()
    assert hidden == {"hidden_ids": [RED.id]}
    assert client.get(url).json()["visible_total"] == 0
    assert client.get(f"{url}/materials").status_code == 404

    shown = client.get(f"{url}/materials", params={"exclude_hidden": False})
    assert shown.status_code == 200
    assert session_store.get(session_id).session.exclude_hidden_materials is True
    assert client.get(f"{url}/materials").status_code == 404
    assert client.get(f"{url}/materials.csv").text.splitlines() == ["id,name,hex,count,percent,hidden"]

    client.patch(f"{url}/preferences", json={"exclude_hidden_materials": False})
    csv_text = client.get(f"{url}/materials.csv").text
    assert csv_text.splitlines()[1].startswith(f"{RED.id},Red,")


def test_switch_session_palette(client, palettes):
    session_id = create(client, uniform_pattern(2, 2, RED))["session_id"]
    url = f"/api/v1/patterns/{session_id}"
    assert client.get(url).json()["visible_total"] == 4

    custom = palettes.add_custom("Reds", [RED])
    summary = client.put(f"{url}/palette", json={"palette_id": custom.id}).json()
    assert summary["palette_id"] == custom.id

    rejected = client.post(f"{url}/replace", json={"mode": "single", "color_id": BLUE.id, "x": 0, "y": 0})
    assert rejected.status_code == 400
    assert client.put(f"{url}/palette", json={"palette_id": "nope"}).status_code == 404


def test_replace_undo_redo(client):
    session_id = create(client, uniform_pattern(3, 3, RED))["session_id"]
    url = f"/api/v1/patterns/{session_id}"

    summary = client.post(f"{url}/replace", json={"mode": "single", "color_id": BLUE.id, "x": 1, "y": 1}).json()
    assert summary["counts"] == {RED.id: 8, BLUE.id: 1}

    summary = client.post(f"{url}/replace", json={"mode": "global", "color_id": WHITE.id, "target_id": RED.id}).json()
    assert summary["counts"] == {WHITE.id: 8, BLUE.id: 1}
    assert summary["can_undo"]

    summary = client.post(f"{url}/undo").json()
    assert summary["counts"] == {RED.id: 8, BLUE.id: 1}
    assert summary["can_redo"]
    summary = client.post(f"{url}/redo").json()
    assert summary["counts"] == {WHITE.id: 8, BLUE.id: 1}


@pytest.mark.parametrize(
    "payload",
    [
        {"mode": "single", "color_id": "nope", "x": 0, "y": 0},
        {"mode": "single", "color_id": BLUE.id, "x": 9, "y": 0},
        {"mode": "single", "color_id": BLUE.id},
        {"mode": "global", "color_id": BLUE.id},
    ],
)
def test_bad_replace_requests(client, payload):
    session_id = create(client, uniform_pattern(3, 3, RED))["session_id"]
    assert client.post(f"/api/v1/patterns/{session_id}/replace", json=payload).status_code == 400


def test_hit_test(client):
    session_id = create(client, make_pattern(4, 3))["session_id"]
    url = f"/api/v1/patterns/{session_id}/hit-test"
    view = {"viewport_width": 800, "viewport_height": 600}

    hit = client.post(url, json={**view, "x": 382, "y": 288}).json()
    assert hit == {"hit": True, "x": 0, "y": 0, "color_id": WHITE.id}

    miss = client.post(url, json={**view, "x": 10, "y": 10}).json()
    assert miss["hit"] is False

    zoomed = client.post(url, json={**view, "zoom": 2.0, "x": 400 - 48 + 12, "y": 300 - 36 + 12}).json()
    assert (zoomed["x"], zoomed["y"]) == (0, 0)


def test_palette_routes(client):
    listing = client.get("/api/v1/palettes").json()["items"]
    assert listing == [{"id": "test", "name": "Test", "builtin": True, "size": 4, "active": True}]
    assert client.get("/api/v1/palettes/nope").status_code == 404

    csv_body = b"id,name,hex\nA1,Alpha,FF0000\nA2,Beta,#00FF00\n"
    imported = client.post("/api/v1/palettes/import", files={"file": ("mine.csv", csv_body, "text/csv")})
    assert imported.status_code == 200, imported.text
    info = imported.json()
    assert info["name"] == "mine"
    assert info["size"] == 2
    assert info["active"] is True

    bad = client.post("/api/v1/palettes/import", files={"file": ("bad.csv", b"nothing here", "text/csv")})
    assert bad.status_code == 400

    assert client.put("/api/v1/palettes/active", json={"palette_id": "test"}).json()["active"] is True
    assert client.delete("/api/v1/palettes/test").status_code == 400
    deleted = client.delete(f"/api/v1/palettes/{info['id']}").json()
    assert deleted == {"deleted": info["id"], "active": "test"}


def test_session_uses_selected_palette(client, palettes):
    palettes.add_custom("Extra", [RED, BLUE])
    summary = create(client, uniform_pattern(2, 2, RED))
    assert summary["palette_id"].startswith("custom_")
