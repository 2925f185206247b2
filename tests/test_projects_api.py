"""Project API tests"""

import pytest

from tests.factories import create_project, project_create_request


async def _create(test_client, headers, **kwargs):
    response = await test_client.post("/api/projects", json=project_create_request(**kwargs), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


# =============================================================================
# Create
# =============================================================================

class TestCreateProject:

    @pytest.mark.asyncio
    async def test_admin_creates_project(self, test_client, admin_headers, member_user):
        project = await _create(test_client, admin_headers, assignee_ids=[member_user["id"]])

        assert project["title"] == "New Project"
        assert project["status"] == "To Do"
        assert project["assignees"][0]["user_id"] == member_user["id"]
        assert project["assignees"][0]["email"] == "member@college.edu"
        assert project["activities"][0]["type"] == "created"
        assert project["access_level"] == "admin"

    @pytest.mark.asyncio
    async def test_moderator_creates_project(self, test_client, spoc_headers):
        project = await _create(test_client, spoc_headers)
        assert project["access_level"] == "moderator"

    @pytest.mark.asyncio
    async def test_member_cannot_create(self, test_client, member_headers):
        response = await test_client.post("/api/projects", json=project_create_request(), headers=member_headers)

        assert response.status_code == 403
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_due_date_before_start_date_rejected(self, test_client, admin_headers):
        body = project_create_request(start_date="2025-01-10T00:00:00", due_date="2025-01-05T00:00:00")

        response = await test_client.post("/api/projects", json=body, headers=admin_headers)

        assert response.status_code == 400
        payload = response.json()
        assert payload["success"] is False
        assert payload["message"] == "Due date must be after start date"
        assert payload["errors"] == ["Due date must be after start date"]

    @pytest.mark.asyncio
    async def test_unknown_assignee_rejected(self, test_client, admin_headers):
        body = project_create_request(assignee_ids=["does-not-exist"])

        response = await test_client.post("/api/projects", json=body, headers=admin_headers)

        assert response.status_code == 400
        assert "assignee" in response.json()["message"].lower()

    @pytest.mark.asyncio
    async def test_initial_status_applies_progress_floor(self, test_client, admin_headers):
        project = await _create(test_client, admin_headers, status="Review", progress=10)
        assert project["progress"] == 75


# =============================================================================
# Read and list
# =============================================================================

class TestReadProjects:

    @pytest.mark.asyncio
    async def test_member_lists_only_participating_projects(
        self, test_client, test_db, member_headers, member_user, admin_user, outsider_user
    ):
        test_db.projects.insert(create_project(created_by=admin_user["id"], assignees=[member_user], title="Mine"))
        test_db.projects.insert(create_project(created_by=member_user["id"], title="Created"))
        test_db.projects.insert(create_project(created_by=admin_user["id"], assignees=[outsider_user], title="Other"))

        response = await test_client.get("/api/projects", headers=member_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert {p["title"] for p in data["projects"]} == {"Mine", "Created"}
        assert data["statistics"]["total"] == 2
        assert data["pagination"]["total_projects"] == 2
        assert all(p["access_level"] == "member" for p in data["projects"])

    @pytest.mark.asyncio
    async def test_list_pagination_and_sort(self, test_client, test_db, admin_headers, admin_user):
        for title in ["Charlie", "alpha", "Bravo"]:
            test_db.projects.insert(create_project(created_by=admin_user["id"], title=title))

        response = await test_client.get(
            "/api/projects",
            params={"sort_by": "title", "sort_order": "asc", "limit": 2, "page": 1},
            headers=admin_headers,
        )

        data = response.json()["data"]
        assert [p["title"] for p in data["projects"]] == ["alpha", "Bravo"]
        assert data["pagination"] == {
            "current_page": 1,
            "total_pages": 2,
            "total_projects": 3,
            "has_next": True,
            "has_prev": False,
            "limit": 2,
        }

    @pytest.mark.asyncio
    async def test_outsider_cannot_read_project(self, test_client, test_db, admin_user, outsider_headers):
        project = create_project(created_by=admin_user["id"])
        test_db.projects.insert(project)

        response = await test_client.get(f"/api/projects/{project['id']}", headers=outsider_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_get_includes_health_and_access_level(self, test_client, test_db, member_user, member_headers):
        project = create_project(created_by=member_user["id"], status="Done", progress=100)
        test_db.projects.insert(project)

        response = await test_client.get(f"/api/projects/{project['id']}", headers=member_headers)

        data = response.json()["data"]
        assert data["health"] == "completed"
        assert data["access_level"] == "member"

    @pytest.mark.asyncio
    async def test_missing_project_is_404(self, test_client, admin_headers):
        response = await test_client.get("/api/projects/not-a-real-id", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Project not found"

    @pytest.mark.asyncio
    async def test_statistics_endpoint(self, test_client, test_db, admin_user, admin_headers):
        test_db.projects.insert(create_project(created_by=admin_user["id"], priority="High"))

        response = await test_client.get("/api/projects/statistics", headers=admin_headers)

        stats = response.json()["data"]
        assert stats["total"] == 1
        assert stats["high_priority"] == 1

    @pytest.mark.asyncio
    async def test_team_members_for_member_limited_to_collaborators(
        self, test_client, test_db, admin_user, member_user, outsider_user, member_headers, admin_headers
    ):
        test_db.projects.insert(create_project(created_by=admin_user["id"], assignees=[member_user]))

        response = await test_client.get("/api/projects/team-members", headers=member_headers)
        emails = {u["email"] for u in response.json()["data"]}
        assert emails == {"admin@college.edu", "member@college.edu"}

        response = await test_client.get("/api/projects/team-members", headers=admin_headers)
        emails = {u["email"] for u in response.json()["data"]}
        assert "outsider@college.edu" in emails


# =============================================================================
# Update
# =============================================================================

class TestUpdateProject:

    @pytest.mark.asyncio
    async def test_member_cannot_update(self, test_client, test_db, member_user, member_headers):
        project = create_project(created_by=member_user["id"])
        test_db.projects.insert(project)

        response = await test_client.put(
            f"/api/projects/{project['id']}", json={"title": "Renamed"}, headers=member_headers
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_moderator_updates_fields(self, test_client, test_db, admin_user, spoc_headers):
        project = create_project(created_by=admin_user["id"])
        test_db.projects.insert(project)

        response = await test_client.put(
            f"/api/projects/{project['id']}",
            json={"title": "Renamed", "priority": "Low", "status": "In Progress"},
            headers=spoc_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Renamed"
        assert data["priority"] == "Low"
        assert data["progress"] == 25
        assert {a["type"] for a in data["activities"]} >= {"status_change", "updated"}

    @pytest.mark.asyncio
    async def test_update_rejects_due_before_stored_start(self, test_client, test_db, admin_user, admin_headers):
        project = create_project(created_by=admin_user["id"])
        test_db.projects.insert(project)

        response = await test_client.put(
            f"/api/projects/{project['id']}", json={"due_date": "2024-12-01T00:00:00"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert "due date" in response.json()["message"].lower()

    @pytest.mark.asyncio
    async def test_status_patch_done_forces_full_progress(self, test_client, test_db, admin_user, admin_headers):
        project = create_project(created_by=admin_user["id"], status="In Progress", progress=40)
        test_db.projects.insert(project)

        response = await test_client.patch(
            f"/api/projects/{project['id']}/status", json={"status": "Done"}, headers=admin_headers
        )

        data = response.json()["data"]
        assert data["status"] == "Done"
        assert data["progress"] == 100
        assert data["activities"][0]["metadata"] == {"from": "In Progress", "to": "Done"}


# =============================================================================
# Delete and archive
# =============================================================================

class TestDeleteAndArchive:

    @pytest.mark.asyncio
    async def test_member_delete_forbidden_even_when_assigned(
        self, test_client, test_db, admin_user, member_user, member_headers
    ):
        project = create_project(created_by=member_user["id"], assignees=[member_user])
        test_db.projects.insert(project)

        response = await test_client.delete(f"/api/projects/{project['id']}", headers=member_headers)

        assert response.status_code == 403
        assert test_db.get_by_id(test_db.projects, project["id"]) is not None

    @pytest.mark.asyncio
    async def test_moderator_delete_forbidden(self, test_client, test_db, admin_user, spoc_headers):
        project = create_project(created_by=admin_user["id"])
        test_db.projects.insert(project)

        response = await test_client.delete(f"/api/projects/{project['id']}", headers=spoc_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_hard_deletes(self, test_client, test_db, admin_user, admin_headers):
        project = create_project(created_by=admin_user["id"])
        test_db.projects.insert(project)

        response = await test_client.delete(f"/api/projects/{project['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert test_db.get_by_id(test_db.projects, project["id"]) is None

        response = await test_client.delete(f"/api/projects/{project['id']}", headers=admin_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_archive_is_soft_and_reversible(self, test_client, test_db, admin_user, admin_headers):
        project = create_project(created_by=admin_user["id"])
        test_db.projects.insert(project)

        response = await test_client.post(f"/api/projects/{project['id']}/archive", headers=admin_headers)
        data = response.json()["data"]
        assert data["is_archived"] is True
        assert data["archived_at"] is not None

        listing = await test_client.get("/api/projects", headers=admin_headers)
        assert listing.json()["data"]["projects"] == []

        listing = await test_client.get("/api/projects", params={"include_archived": "true"}, headers=admin_headers)
        assert len(listing.json()["data"]["projects"]) == 1

        response = await test_client.post(f"/api/projects/{project['id']}/unarchive", headers=admin_headers)
        assert response.json()["data"]["is_archived"] is False


# =============================================================================
# Comments, activities, milestones
# =============================================================================

class TestCollaboration:

    @pytest.mark.asyncio
    async def test_assigned_member_can_comment(self, test_client, test_db, admin_user, member_user, member_headers):
        project = create_project(created_by=admin_user["id"], assignees=[member_user])
        test_db.projects.insert(project)

        response = await test_client.post(
            f"/api/projects/{project['id']}/comments", json={"message": "Looks good"}, headers=member_headers
        )

        assert response.status_code == 201
        stored = test_db.get_by_id(test_db.projects, project["id"])
        assert stored["comments"][0]["message"] == "Looks good"
        assert stored["activities"][0]["type"] == "comment"

    @pytest.mark.asyncio
    async def test_outsider_cannot_comment(self, test_client, test_db, admin_user, outsider_headers):
        project = create_project(created_by=admin_user["id"])
        test_db.projects.insert(project)

        response = await test_client.post(
            f"/api/projects/{project['id']}/comments", json={"message": "Hi"}, headers=outsider_headers
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_empty_comment_rejected(self, test_client, test_db, admin_user, admin_headers):
        project = create_project(created_by=admin_user["id"])
        test_db.projects.insert(project)

        response = await test_client.post(
            f"/api/projects/{project['id']}/comments", json={"message": ""}, headers=admin_headers
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_milestone_lifecycle(self, test_client, test_db, admin_user, admin_headers):
        project = create_project(created_by=admin_user["id"])
        test_db.projects.insert(project)

        response = await test_client.post(
            f"/api/projects/{project['id']}/milestones", json={"title": "Prototype"}, headers=admin_headers
        )
        assert response.status_code == 201
        milestone = response.json()["data"]

        response = await test_client.patch(
            f"/api/projects/{project['id']}/milestones/{milestone['id']}",
            json={"completed": True},
            headers=admin_headers,
        )
        assert response.json()["data"]["completed"] is True
        assert response.json()["data"]["completed_at"] is not None

        response = await test_client.get(f"/api/projects/{project['id']}/activities", headers=admin_headers)
        descriptions = [a["description"] for a in response.json()["data"]]
        assert descriptions[0] == "completed milestone: Prototype"

        response = await test_client.patch(
            f"/api/projects/{project['id']}/milestones/missing", json={"completed": True}, headers=admin_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_writes_reach_global_activity_log(self, test_client, test_db, admin_headers):
        project = await _create(test_client, admin_headers)

        response = await test_client.get(f"/api/activities/entity/project/{project['id']}", headers=admin_headers)

        entries = response.json()["data"]
        assert entries[0]["action"] == "created"
        assert entries[0]["user"]["email"] == "admin@college.edu"
