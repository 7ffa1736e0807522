def test_list_dashboards(client):
    resp = client.get("/dashboards")
    assert resp.status_code == 200
    body = resp.json()
    assert body["active_id"] == "1"
    assert len(body["dashboards"]) == 4


def test_dashboard_view(client):
    resp = client.get("/dashboards/1/view")
    assert resp.status_code == 200
    body = resp.json()
    assert body["kpis"]["total_revenue"] == 328000
    assert body["charts"]["category"]["mark"]["type"] == "arc"


def test_unknown_dashboard_is_404(client):
    resp = client.get("/dashboards/missing/view")
    assert resp.status_code == 404
    assert resp.json()["type"] == "KeyError"


def test_drill_breadcrumb_and_overview(client):
    resp = client.post("/dashboards/1/drill", json={"dimension": "category", "value": "Electronics"})
    assert resp.status_code == 200
    assert resp.json()["data"]["category"][0] == {"label": "Laptops", "value": 45, "color": "#8b5cf6"}

    client.post("/dashboards/1/drill", json={"dimension": "region", "value": "Unknown"})
    body = client.get("/dashboards/1/view").json()
    assert [c["label"] for c in body["breadcrumbs"]] == ["Overview", "Electronics", "Unknown"]
    assert body["data"]["region"] == []

    body = client.post("/dashboards/1/breadcrumbs/1").json()
    assert body["drill_path"] == [{"dimension": "category", "value": "Electronics"}]

    body = client.post("/dashboards/1/overview").json()
    assert body["drill_path"] == []
    assert body["data"]["category"][0]["label"] == "Electronics"


def test_drill_state_is_per_dashboard(client):
    client.post("/dashboards/1/drill", json={"dimension": "region", "value": "West"})
    assert client.get("/dashboards/2/view").json()["drill_path"] == []


def test_drill_rejects_unknown_dimension(client):
    resp = client.post("/dashboards/1/drill", json={"dimension": "product", "value": "Laptops"})
    assert resp.status_code == 422


def test_move_requires_edit_mode(client):
    resp = client.post("/dashboards/1/widgets/revenue/move", json={"x": 10, "y": 13})
    revenue = next(w for w in resp.json()["widgets"] if w["id"] == "revenue")
    assert (revenue["x"], revenue["y"]) == (0, 0)

    assert client.post("/dashboards/1/edit-mode", json={"enabled": True}).json()["edit_mode"] is True
    resp = client.post("/dashboards/1/widgets/revenue/move", json={"x": 10, "y": 13})
    revenue = next(w for w in resp.json()["widgets"] if w["id"] == "revenue")
    assert (revenue["x"], revenue["y"]) == (0, 24)

    resp = client.post("/dashboards/1/widgets/ghost/move", json={"x": 48, "y": 48})
    assert resp.status_code == 200
    assert "ghost" not in {w["id"] for w in resp.json()["widgets"]}

    body = client.post("/dashboards/1/edit-mode", json={"enabled": False}).json()
    assert body["edit_mode"] is False


def test_create_and_delete_dashboard(client):
    resp = client.post("/dashboards", json={"name": "Pipeline", "team": "Sales"})
    assert resp.status_code == 201
    new_id = resp.json()["id"]
    assert client.get("/dashboards").json()["active_id"] == new_id

    resp = client.delete(f"/dashboards/{new_id}")
    assert resp.status_code == 200
    assert resp.json()["active_id"] == "1"


def test_create_dashboard_validation(client):
    resp = client.post("/dashboards", json={"name": "", "team": "Sales"})
    assert resp.status_code == 400


def test_toggle_favorite(client):
    assert client.post("/dashboards/3/favorite").json()["favorite"] is True


def test_reports_flow(client):
    resp = client.post(
        "/reports",
        json={
            "name": "Quantity by Region",
            "columns": [{"id": "s3", "name": "Quantity", "type": "number"}],
            "filters": [{"column": "Region", "operator": "equals", "value": "West"}],
            "drill_down_levels": [{"column": "State"}],
            "chart_type": "bar",
            "dashboards": ["3"],
        },
    )
    assert resp.status_code == 201
    report = resp.json()["report"]
    assert resp.json()["message"] == 'Report "Quantity by Region" saved successfully!'
    assert report["columns"] == [{"id": "s3", "name": "Quantity", "type": "number", "table": "sales"}]
    assert [d["column"] for d in report["drill_down_levels"]] == ["State"]

    assert [r["id"] for r in client.get("/dashboards/3/reports").json()["reports"]] == [report["id"]]

    resp = client.patch(f"/reports/{report['id']}", json={"chart_type": "pie"})
    assert resp.json()["chart_type"] == "pie"
    assert client.patch(f"/reports/{report['id']}", json={"chart_type": "radar"}).status_code == 400

    resp = client.post(f"/reports/{report['id']}/export", json={"format": "csv"})
    assert resp.json()["message"] == "Exporting report as CSV..."

    assert client.delete(f"/reports/{report['id']}").status_code == 200
    assert client.delete(f"/reports/{report['id']}").status_code == 404


def test_schedules_flow(client):
    body = client.get("/schedules").json()
    assert len(body["schedules"]) == 2
    assert len(body["insights"]) == 3

    resp = client.post(
        "/schedules",
        json={"name": "Ops digest", "content_type": "dashboard", "content_id": "4", "recipients": "ops@company.com"},
    )
    assert resp.status_code == 201
    schedule = resp.json()
    assert schedule["content_name"] == "Operations Dashboard"

    assert client.post(f"/schedules/{schedule['id']}/toggle").json()["enabled"] is False
    assert client.delete(f"/schedules/{schedule['id']}").status_code == 200


def test_data_sources_flow(client):
    resp = client.post("/data-sources", json={"name": "Orders", "type": "MySQL"})
    assert resp.status_code == 201
    source_id = resp.json()["id"]
    assert len(client.get("/data-sources").json()["data_sources"]) == 3
    assert client.post("/data-sources", json={"name": "Old", "type": "Oracle"}).status_code == 400
    assert client.delete(f"/data-sources/{source_id}").status_code == 200


def test_meta(client):
    assert "Customer Success" in client.get("/meta/teams").json()["teams"]
    assert "Snowflake" in client.get("/meta/integrations").json()["integrations"]
    assert [c["name"] for c in client.get("/meta/columns", params={"table": "customers"}).json()["columns"]] == [
        "Customer Name",
        "Email",
        "Total Spent",
    ]
