import pytest
from sqlalchemy import func, select

from codeplay.db.postgres.models.playgrounds import Playground, PlaygroundTemplateKind, StarMark, TemplateFile
from codeplay.services.playground_templates import build_template_files
from ._helpers import at, seed_playground, seed_user, user_headers


@pytest.mark.asyncio
async def test_project_routes_require_bearer(client):
    resp = await client.get("/api/projects")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Missing or invalid authorization header"


@pytest.mark.asyncio
async def test_create_snapshots_template_files(client, db_session):
    owner = await seed_user(db_session)
    headers = user_headers(owner)

    resp = await client.post(
        "/api/projects",
        headers=headers,
        json={"title": "  My Vue App ", "description": "demo", "template": "vue"},
    )
    assert resp.status_code == 201
    created = resp.json()
    assert created["title"] == "My Vue App"
    assert created["template"] == "VUE"
    assert created["userId"] == str(owner.id)
    assert created["isStarred"] is False
    assert created["templateFiles"]["content"] == build_template_files("VUE")
    assert "createdAt" in created and "updatedAt" in created


@pytest.mark.asyncio
async def test_create_validates_title_and_template(client, db_session):
    owner = await seed_user(db_session)
    headers = user_headers(owner)

    blank = await client.post("/api/projects", headers=headers, json={"title": "   ", "template": "REACT"})
    assert blank.status_code == 400

    unknown = await client.post("/api/projects", headers=headers, json={"title": "x", "template": "svelte"})
    assert unknown.status_code == 400
    detail = unknown.json()["detail"]
    for kind in PlaygroundTemplateKind:
        assert kind.value in detail

    total = await db_session.scalar(select(func.count()).select_from(Playground))
    assert total == 0


@pytest.mark.asyncio
async def test_list_is_scoped_filtered_and_paginated(client, db_session):
    owner = await seed_user(db_session)
    other = await seed_user(db_session)
    await seed_playground(db_session, owner, title="Alpha dashboard", created_at=at(1))
    await seed_playground(
        db_session,
        owner,
        title="Beta api",
        description="An Express DASHBOARD backend",
        template=PlaygroundTemplateKind.EXPRESS,
        created_at=at(2),
    )
    await seed_playground(db_session, owner, title="Gamma", created_at=at(3))
    await seed_playground(db_session, other, title="Other dashboard", created_at=at(4))
    headers = user_headers(owner)

    resp = await client.get("/api/projects", headers=headers)
    assert resp.status_code == 200
    payload = resp.json()
    assert [item["title"] for item in payload["data"]] == ["Gamma", "Beta api", "Alpha dashboard"]
    assert payload["pagination"] == {"page": 1, "limit": 10, "total": 3, "pages": 1}
    assert "templateFiles" not in payload["data"][0]

    page_two = await client.get("/api/projects", headers=headers, params={"page": 2, "limit": 2})
    assert [item["title"] for item in page_two.json()["data"]] == ["Alpha dashboard"]
    assert page_two.json()["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}

    searched = await client.get("/api/projects", headers=headers, params={"search": "dashboard"})
    assert {item["title"] for item in searched.json()["data"]} == {"Alpha dashboard", "Beta api"}

    filtered = await client.get("/api/projects", headers=headers, params={"template": "express"})
    assert [item["title"] for item in filtered.json()["data"]] == ["Beta api"]


@pytest.mark.asyncio
async def test_list_rejects_bad_query_values(client, db_session):
    owner = await seed_user(db_session)
    headers = user_headers(owner)

    for params in ({"template": "svelte"}, {"page": 0}, {"limit": 0}, {"limit": 101}):
        resp = await client.get("/api/projects", headers=headers, params=params)
        assert resp.status_code == 400, params


@pytest.mark.asyncio
async def test_get_includes_files_and_star_state(client, db_session):
    owner = await seed_user(db_session)
    playground = await seed_playground(db_session, owner, content={"a.js": {"name": "a.js", "type": "file", "content": "1"}})
    db_session.add(StarMark(user_id=owner.id, playground_id=playground.id))
    await db_session.commit()

    resp = await client.get(f"/api/projects/{playground.id}", headers=user_headers(owner))
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["isStarred"] is True
    assert payload["templateFiles"]["content"]["a.js"]["content"] == "1"
    assert payload["templateFiles"]["playgroundId"] == str(playground.id)


@pytest.mark.asyncio
async def test_update_patches_fields_without_regenerating_files(client, db_session):
    owner = await seed_user(db_session)
    content = {"keep.txt": {"name": "keep.txt", "type": "file", "content": "mine"}}
    playground = await seed_playground(db_session, owner, title="Before", description="old", content=content)
    headers = user_headers(owner)

    resp = await client.put(
        f"/api/projects/{playground.id}",
        headers=headers,
        json={"title": "After", "template": "hono"},
    )
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["title"] == "After"
    assert payload["description"] == "old"
    assert payload["template"] == "HONO"
    assert payload["templateFiles"]["content"] == content

    blank = await client.put(f"/api/projects/{playground.id}", headers=headers, json={"title": ""})
    assert blank.status_code == 400
    unknown = await client.put(f"/api/projects/{playground.id}", headers=headers, json={"template": "svelte"})
    assert unknown.status_code == 400


@pytest.mark.asyncio
async def test_save_files_replaces_blob(client, db_session):
    owner = await seed_user(db_session)
    playground = await seed_playground(db_session, owner)
    new_content = {"src": {"name": "src", "type": "folder", "children": {"x.ts": {"name": "x.ts", "type": "file", "content": "export {}"}}}}

    resp = await client.put(
        f"/api/projects/{playground.id}/files",
        headers=user_headers(owner),
        json={"content": new_content},
    )
    assert resp.status_code == 200
    assert resp.json()["templateFiles"]["content"] == new_content

    stored = await db_session.scalar(select(TemplateFile).where(TemplateFile.playground_id == playground.id))
    await db_session.refresh(stored)
    assert stored.content == new_content


@pytest.mark.asyncio
async def test_delete_cascades_files_and_stars(client, db_session):
    owner = await seed_user(db_session)
    playground = await seed_playground(db_session, owner)
    db_session.add(StarMark(user_id=owner.id, playground_id=playground.id))
    await db_session.commit()
    headers = user_headers(owner)

    resp = await client.delete(f"/api/projects/{playground.id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Project deleted successfully"}

    assert await db_session.scalar(select(func.count()).select_from(Playground)) == 0
    assert await db_session.scalar(select(func.count()).select_from(TemplateFile)) == 0
    assert await db_session.scalar(select(func.count()).select_from(StarMark)) == 0

    again = await client.get(f"/api/projects/{playground.id}", headers=headers)
    assert again.status_code == 404
