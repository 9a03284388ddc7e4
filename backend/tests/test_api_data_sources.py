"""Integration tests for data source endpoints."""

import pytest
from sqlalchemy import select

from conftest import auth_headers
from vizboard.models import AiAnalysis, Dashboard, DataSource, Widget

pytestmark = pytest.mark.integration


async def test_requests_without_token_are_rejected(client) -> None:
    response = await client.get("/api/data-sources", headers={"Authorization": ""})

    assert response.status_code in (401, 403)


async def test_invalid_token_is_unauthorized(client) -> None:
    response = await client.get("/api/data-sources", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401


async def test_unknown_user_with_email_claim_is_provisioned(client) -> None:
    from vizboard.core.security import create_access_token

    token = create_access_token({"sub": "42", "email": "new@example.com"})

    response = await client.get("/api/data-sources", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json() == []


async def test_upload_csv_and_json(client) -> None:
    files = [
        ("files", ("sales.csv", b"month,sales\nJan,100\nFeb,150\n", "text/csv")),
        ("files", ("broken.json", b"{oops", "application/json")),
    ]

    response = await client.post("/api/data-sources/upload", files=files)

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    csv_source, json_source = body["sources"]
    assert csv_source["status"] == "ready"
    assert csv_source["fileType"] == "csv"
    assert csv_source["metadata"]["columnNames"] == ["month", "sales"]
    assert json_source["status"] == "pending"
    assert json_source["errorMessage"].startswith("Could not parse JSON file")


async def test_upload_rejects_unsupported_type(client) -> None:
    response = await client.post("/api/data-sources/upload", files=[("files", ("notes.pdf", b"%PDF", "application/pdf"))])

    assert response.status_code == 415


async def test_upload_rejects_oversized_file(client, monkeypatch) -> None:
    from vizboard.core.config import settings

    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 10)

    response = await client.post("/api/data-sources/upload", files=[("files", ("big.csv", b"a,b\n1,2\n3,4\n", "text/csv"))])

    assert response.status_code == 413


async def test_url_source_is_named_after_host(client) -> None:
    response = await client.post("/api/data-sources/url", json={"url": "https://data.example.org/export.json"})

    assert response.status_code == 200
    assert response.json()["name"] == "data.example.org"
    assert response.json()["status"] == "pending"
    assert response.json()["type"] == "url"


async def test_url_source_requires_http_scheme(client) -> None:
    response = await client.post("/api/data-sources/url", json={"url": "ftp://example.org/file"})

    assert response.status_code == 422


async def test_cloud_source_validates_provider(client) -> None:
    ok = await client.post("/api/data-sources/cloud", json={"provider": "onedrive", "fileId": "abc123"})
    bad = await client.post("/api/data-sources/cloud", json={"provider": "dropbox", "fileId": "abc123"})

    assert ok.status_code == 200
    assert ok.json()["name"] == "Cloud file abc123"
    assert ok.json()["type"] == "onedrive"
    assert bad.status_code == 422


async def test_other_users_sources_are_hidden(client, add, other_user) -> None:
    foreign = await add(DataSource(user_id=other_user.id, name="theirs.csv", type="file", status="pending"))

    listing = await client.get("/api/data-sources")
    single = await client.get(f"/api/data-sources/{foreign.id}")

    assert listing.json() == []
    assert single.status_code == 404


async def test_delete_nulls_widget_reference_and_drops_analyses(client, add, session_factory, user, sales_source) -> None:
    dashboard = await add(Dashboard(user_id=user.id, title="Sales"))
    widget = await add(Widget(
        dashboard_id=dashboard.id,
        data_source_id=sales_source.id,
        type="bar",
        title="Sales",
        config={"data": [{"month": "Jan", "sales": 100}]},
        position={"x": 0, "y": 0, "w": 1, "h": 1},
    ))
    await add(AiAnalysis(data_source_id=sales_source.id, analysis_type="summary", result={"title": "t"}))

    response = await client.delete(f"/api/data-sources/{sales_source.id}")

    assert response.json() == {"success": True}
    async with session_factory() as session:
        kept = (await session.execute(select(Widget).where(Widget.id == widget.id))).scalar_one()
        analyses = (await session.execute(select(AiAnalysis))).scalars().all()
        sources = (await session.execute(select(DataSource))).scalars().all()
    assert kept.data_source_id is None
    assert kept.config["data"] == [{"month": "Jan", "sales": 100}]
    assert analyses == []
    assert sources == []


async def test_analyze_appends_analysis(client, sales_source, ai_stub) -> None:
    response = await client.post(f"/api/data-sources/{sales_source.id}/analyze")

    assert response.status_code == 200
    assert response.json()["analysisType"] == "summary"
    assert response.json()["result"]["suggested_charts"] == ["bar", "line"]
    assert ai_stub.calls == [("analyze", "sales.csv", 2)]

    listing = await client.get("/api/ai-analyses")
    assert [item["dataSourceId"] for item in listing.json()] == [sales_source.id]


async def test_analyze_requires_ready_source(client, add, user) -> None:
    pending = await add(DataSource(user_id=user.id, name="later", type="url", status="pending"))

    response = await client.post(f"/api/data-sources/{pending.id}/analyze")

    assert response.status_code == 400


async def test_nlq_returns_widget_with_frozen_rows(client, sales_source) -> None:
    response = await client.post("/api/nlq", json={"question": "Sales by month?", "dataSourceId": sales_source.id})

    assert response.status_code == 200
    body = response.json()
    assert body["type"] == "bar"
    assert body["dataSourceId"] == sales_source.id
    assert body["config"] == {
        "xAxis": "month",
        "yAxis": "sales",
        "data": [{"month": "Jan", "sales": 100}, {"month": "Feb", "sales": 150}],
    }


async def test_foreign_user_cannot_delete_source(client, sales_source, other_user) -> None:
    response = await client.delete(f"/api/data-sources/{sales_source.id}", headers=auth_headers(other_user.id))

    assert response.status_code == 404
