import re

import pytest
from fastapi.testclient import TestClient

from csv_service.api.deps import get_decoder
from csv_service.core.config import Settings
from csv_service.main import create_app


def _post_csv(client, content, filename="data.csv", content_type="text/csv"):
    if isinstance(content, str):
        content = content.encode("utf-8")
    return client.post("/convert", files={"csvFile": (filename, content, content_type)})


def _leftovers(upload_dir):
    return sorted(path.name for path in upload_dir.iterdir()) if upload_dir.exists() else []


def test_convert_returns_records_count_and_timing(client, upload_dir):
    response = _post_csv(client, "a,b\n1,2\n3,4\n")

    assert response.status_code == 200
    body = response.json()
    assert body["data"] == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}]
    assert body["rowCount"] == 2
    assert re.fullmatch(r"\d+ms", body["processingTime"])
    assert _leftovers(upload_dir) == []


@pytest.mark.parametrize("rows", [0, 1, 25, 500])
def test_row_count_matches_data_rows(client, rows):
    content = "id,value\n" + "".join(f"{i},v{i}\n" for i in range(rows))
    body = _post_csv(client, content).json()
    assert body["rowCount"] == rows
    assert len(body["data"]) == rows


def test_response_keys_follow_header_order(client):
    response = _post_csv(client, "zeta,alpha,mid\n1,2,3\n")
    assert list(response.json()["data"][0]) == ["zeta", "alpha", "mid"]


@pytest.mark.parametrize(
    ("filename", "content_type"),
    [
        ("data.csv", "text/csv"),
        ("data.csv", "application/octet-stream"),
        ("DATA.CSV", "application/vnd.ms-excel"),
        ("export.txt", "text/csv"),
        ("export", "text/csv; charset=utf-8"),
    ],
)
def test_csv_accepted_by_type_or_extension(client, filename, content_type):
    response = _post_csv(client, "a\n1\n", filename=filename, content_type=content_type)
    assert response.status_code == 200
    assert response.json()["rowCount"] == 1


@pytest.mark.parametrize(
    ("filename", "content_type"),
    [
        ("notes.txt", "text/plain"),
        ("image.png", "image/png"),
        ("data.csv.exe", "application/octet-stream"),
    ],
)
def test_non_csv_upload_is_rejected(client, upload_dir, filename, content_type):
    response = _post_csv(client, "a,b\n1,2\n", filename=filename, content_type=content_type)
    assert response.status_code == 400
    assert response.json() == {"error": "Only CSV files are allowed"}
    assert _leftovers(upload_dir) == []


def test_missing_file_field(client, upload_dir):
    response = client.post("/convert")
    assert response.status_code == 400
    assert response.json() == {"error": "No file uploaded"}
    assert _leftovers(upload_dir) == []


def test_file_under_another_field_name_counts_as_missing(client):
    response = client.post("/convert", files={"file": ("data.csv", b"a\n1\n", "text/csv")})
    assert response.status_code == 400
    assert response.json() == {"error": "No file uploaded"}


def test_text_field_named_csv_file_counts_as_missing(client, upload_dir):
    response = client.post("/convert", data={"csvFile": "a,b\n1,2\n"})
    assert response.status_code == 400
    assert response.json() == {"error": "No file uploaded"}
    assert _leftovers(upload_dir) == []


def test_long_cell_is_converted(client):
    response = _post_csv(client, "a,b\n1," + "x" * 200_000 + "\n")
    assert response.status_code == 200
    body = response.json()
    assert body["rowCount"] == 1
    assert len(body["data"][0]["b"]) == 200_000


def test_success_body_has_only_the_aliased_keys(client):
    response = _post_csv(client, "a\n1\n")
    assert response.headers["content-type"] == "application/json"
    assert list(response.json()) == ["data", "rowCount", "processingTime"]


def test_malformed_csv_yields_server_error_and_no_records(client, upload_dir):
    response = _post_csv(client, "a,b\n1,2\n3\n")
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to convert file"}
    assert _leftovers(upload_dir) == []


def test_oversize_upload_is_aborted(upload_dir):
    app = create_app(Settings(upload_dir=upload_dir, max_file_size_bytes=16, upload_chunk_size=4))
    with TestClient(app) as client:
        response = _post_csv(client, "a,b\n" + "1,2\n" * 10)
    assert response.status_code == 413
    assert response.json() == {"error": "File exceeds the maximum allowed size of 16 bytes"}
    assert _leftovers(upload_dir) == []


def test_upload_at_exact_size_limit_is_accepted(upload_dir):
    content = "a,b\n1,2\n3,4\n"
    app = create_app(Settings(upload_dir=upload_dir, max_file_size_bytes=len(content)))
    with TestClient(app) as client:
        response = _post_csv(client, content)
    assert response.status_code == 200
    assert response.json()["rowCount"] == 2


def test_row_cap_truncates_response(upload_dir):
    app = create_app(Settings(upload_dir=upload_dir, max_rows=5))
    with TestClient(app) as client:
        response = _post_csv(client, "n\n" + "".join(f"{i}\n" for i in range(8)))
    body = response.json()
    assert response.status_code == 200
    assert body["rowCount"] == 5
    assert body["data"][-1] == {"n": "4"}
    assert _leftovers(upload_dir) == []


def test_startup_purges_leftover_files(settings, upload_dir):
    upload_dir.mkdir(parents=True)
    (upload_dir / "1690000000000-crashed.csv").write_text("a\n1\n")
    (upload_dir / "1690000000001-other.csv").write_text("b\n2\n")

    with TestClient(create_app(settings)):
        assert _leftovers(upload_dir) == []


def test_startup_creates_missing_directory(client, upload_dir):
    assert upload_dir.is_dir()


class _ExplodingDecoder:
    def decode(self, path):
        raise RuntimeError("disk on fire")


@pytest.mark.parametrize(
    ("environment", "message"),
    [
        ("development", "disk on fire"),
        ("production", "Please try again later"),
    ],
)
def test_unexpected_error_returns_generic_500(upload_dir, environment, message):
    app = create_app(Settings(upload_dir=upload_dir, environment=environment))
    app.dependency_overrides[get_decoder] = lambda: _ExplodingDecoder()
    with TestClient(app, raise_server_exceptions=False) as client:
        response = _post_csv(client, "a\n1\n")
    assert response.status_code == 500
    assert response.json() == {"error": "Server encountered an unexpected error", "message": message}
    assert _leftovers(upload_dir) == []


def test_unknown_route_returns_json_error(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_cors_allows_any_origin(client):
    response = client.options(
        "/convert",
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
