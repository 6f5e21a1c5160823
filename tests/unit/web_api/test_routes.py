def test_app_has_resource_routes(app):
    paths = app.openapi()["paths"]

    assert "/buildpacks/{guid}" in paths
    assert "/droplets/{guid}" in paths
    assert "/packages/{guid}" in paths
    assert "/buildpack_cache/entries/{app_guid}/{stack_name}" in paths
    assert "/buildpack_cache/entries/{app_guid}" in paths
    assert "/buildpack_cache/entries" in paths
    assert "/sign/{path}" in paths
    assert "/health" in paths


def test_resource_routes_methods(app):
    paths = app.openapi()["paths"]

    assert set(paths["/droplets/{guid}"]) == {"put", "get", "delete"}
    assert set(paths["/sign/{path}"]) == {"get"}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == "1.0.0"
