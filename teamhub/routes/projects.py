"""Project routes"""

import copy
import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from teamhub.auth.unified import AuthContext, get_auth_context, require_admin, require_moderator
from teamhub.models.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectStatusUpdate,
    ProjectFilters,
    ProjectPriority,
    CommentCreate,
    MilestoneCreate,
    MilestoneUpdate,
)
from teamhub.responses import success
from teamhub.services.access import (
    AccessLevel,
    build_project_query,
    can_edit,
    can_manage_projects,
    can_view,
    evaluate_access,
)
from teamhub.services.activity import record_activity
from teamhub.services.database import db, Q
from teamhub.services import projects as project_service
from teamhub.services.projects import ProjectValidationError

logger = logging.getLogger(__name__)
router = APIRouter()


def _load(project_id: str, auth: AuthContext, need_edit: bool = False):
    """Fetch a project and the caller's access level, enforcing read or edit rights"""
    project = project_service.find_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    level = evaluate_access(auth.user_id, auth.role, project)
    if not can_view(level):
        raise HTTPException(status_code=403, detail="You do not have access to this project")
    if need_edit and not can_edit(level):
        raise HTTPException(status_code=403, detail="You do not have permission to modify this project")

    return project, level


def _save(project: dict, previous: Optional[dict] = None) -> dict:
    try:
        return project_service.save_project(project, previous)
    except ProjectValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _view(project: dict, level: Optional[AccessLevel] = None) -> dict:
    view = {**project, "health": project_service.project_health(project)}
    if level is not None:
        view["access_level"] = level.value
    return view


# =============================================================================
# Collection
# =============================================================================

@router.get("")
async def list_projects(
    status: Optional[str] = Query(None, description="Status, or 'overdue'"),
    priority: Optional[ProjectPriority] = None,
    assignee: Optional[str] = None,
    search: Optional[str] = None,
    include_archived: bool = False,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = "created_at",
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    auth: AuthContext = Depends(get_auth_context)
):
    """List the projects the caller can see, with statistics and pagination"""
    filters = ProjectFilters(
        status=status,
        priority=priority.value if priority else None,
        assignee=assignee,
        search=search,
        include_archived=include_archived,
    )
    query = build_project_query(auth.user_id, auth.role, filters)
    matches = project_service.sort_projects(db.projects.search(query), sort_by, sort_order)

    total = len(matches)
    start = (page - 1) * limit
    page_items = matches[start:start + limit]

    return success(data={
        "projects": [
            _view(p, evaluate_access(auth.user_id, auth.role, p)) for p in page_items
        ],
        "statistics": project_service.get_statistics(auth.user_id, auth.role),
        "pagination": {
            "current_page": page,
            "total_pages": math.ceil(total / limit),
            "total_projects": total,
            "has_next": page * limit < total,
            "has_prev": page > 1,
            "limit": limit,
        },
    })


@router.get("/statistics")
async def get_statistics(auth: AuthContext = Depends(get_auth_context)):
    return success(data=project_service.get_statistics(auth.user_id, auth.role))


@router.get("/team-members")
async def list_team_members(auth: AuthContext = Depends(get_auth_context)):
    """Users available for assignment"""
    users = [u for u in db.users.all() if u.get("is_active", True)]
    if not can_manage_projects(auth.role):
        allowed = project_service.team_member_ids(auth.user_id) | {auth.user_id}
        users = [u for u in users if u["id"] in allowed]

    users.sort(key=lambda u: (u.get("display_name") or u["email"]).lower())
    return success(data=[
        {
            "id": u["id"],
            "name": project_service.user_label(u),
            "email": u["email"],
            "avatar": u.get("photo_url"),
            "color": project_service.assignee_color(u["id"]),
        }
        for u in users
    ])


@router.post("")
async def create_project(data: ProjectCreate, auth: AuthContext = Depends(require_moderator)):
    """Create a project (admins and moderators)"""
    try:
        project = project_service.new_project(data, auth.user)
    except ProjectValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _save(project)
    logger.info(f"Project created: {project['id']} by {auth.user_id}")

    record_activity(
        auth.user_id, "created", "project", project["id"], project["title"],
        f"Created project: \"{project['title']}\""
    )
    level = evaluate_access(auth.user_id, auth.role, project)
    return success("Project created successfully", _view(project, level), status_code=201)


# =============================================================================
# Single project
# =============================================================================

@router.get("/{project_id}")
async def get_project(project_id: str, auth: AuthContext = Depends(get_auth_context)):
    project, level = _load(project_id, auth)
    return success(data=_view(project, level))


@router.put("/{project_id}")
async def update_project(project_id: str, data: ProjectUpdate, auth: AuthContext = Depends(get_auth_context)):
    """Update project fields (admin or moderator access)"""
    project, level = _load(project_id, auth, need_edit=True)
    previous = copy.deepcopy(project)

    updates = data.model_dump(exclude_unset=True, exclude={"status", "assignee_ids", "risks", "tags"})
    changed = []
    for field, value in updates.items():
        if value is None and field in ("title", "start_date", "due_date", "progress", "priority"):
            continue
        if field in ("start_date", "due_date"):
            value = project_service.iso(value)
        elif field == "priority":
            value = value.value if hasattr(value, "value") else value
        elif field == "title":
            value = value.strip()
        if project.get(field) != value:
            project[field] = value
            changed.append(field)

    if data.risks is not None:
        project["risks"] = [r.model_dump(mode="json") for r in data.risks]
        changed.append("risks")

    if data.tags is not None:
        project["tags"] = [t.strip() for t in data.tags if t.strip()]
        changed.append("tags")

    if data.assignee_ids is not None:
        try:
            assignees = project_service.build_assignees(data.assignee_ids)
        except ProjectValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        old_ids = {a["user_id"] for a in project.get("assignees", [])}
        new_ids = {a["user_id"] for a in assignees}
        project["assignees"] = assignees
        if old_ids != new_ids:
            changed.append("assignees")
            project_service.add_activity(
                project, "assigned", auth.user, "updated project assignees",
                {"added": sorted(new_ids - old_ids), "removed": sorted(old_ids - new_ids)}
            )

    if data.status is not None:
        project_service.change_status(project, auth.user, data.status.value)

    if changed:
        project_service.add_activity(
            project, "updated", auth.user, f"updated {', '.join(changed)}", {"fields": changed}
        )

    _save(project, previous)
    record_activity(
        auth.user_id, "updated", "project", project["id"], project["title"],
        f"Updated project: \"{project['title']}\"", {"fields": changed}
    )
    return success("Project updated successfully", _view(project, level))


@router.patch("/{project_id}/status")
async def update_project_status(
    project_id: str,
    data: ProjectStatusUpdate,
    auth: AuthContext = Depends(get_auth_context)
):
    """Kanban move"""
    project, level = _load(project_id, auth, need_edit=True)
    previous = copy.deepcopy(project)

    if project_service.change_status(project, auth.user, data.status.value):
        _save(project, previous)
        action = "completed" if data.status.value == "Done" else "updated"
        record_activity(
            auth.user_id, action, "project", project["id"], project["title"],
            f"Moved project \"{project['title']}\" to {data.status.value}",
            {"from": previous.get("status"), "to": data.status.value}
        )

    return success("Project status updated successfully", _view(project, level))


@router.delete("/{project_id}")
async def delete_project(project_id: str, auth: AuthContext = Depends(require_admin)):
    """Permanently delete a project (Admin only)"""
    project = project_service.find_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    db.projects.remove(Q.id == project_id)
    logger.info(f"Project deleted: {project_id} by {auth.user_id}")

    record_activity(
        auth.user_id, "deleted", "project", project_id, project["title"],
        f"Deleted project: \"{project['title']}\""
    )
    return success("Project deleted successfully")


@router.post("/{project_id}/archive")
async def archive_project(project_id: str, auth: AuthContext = Depends(get_auth_context)):
    """Soft delete: hide the project from default listings"""
    project, level = _load(project_id, auth, need_edit=True)
    if project.get("is_archived"):
        raise HTTPException(status_code=400, detail="Project is already archived")

    previous = copy.deepcopy(project)
    project["is_archived"] = True
    project_service.add_activity(project, "archived", auth.user, "archived the project")
    _save(project, previous)

    record_activity(
        auth.user_id, "archived", "project", project["id"], project["title"],
        f"Archived project: \"{project['title']}\""
    )
    return success("Project archived successfully", _view(project, level))


@router.post("/{project_id}/unarchive")
async def unarchive_project(project_id: str, auth: AuthContext = Depends(get_auth_context)):
    project, level = _load(project_id, auth, need_edit=True)
    if not project.get("is_archived"):
        raise HTTPException(status_code=400, detail="Project is not archived")

    previous = copy.deepcopy(project)
    project["is_archived"] = False
    project_service.add_activity(project, "unarchived", auth.user, "restored the project")
    _save(project, previous)

    record_activity(
        auth.user_id, "updated", "project", project["id"], project["title"],
        f"Restored project: \"{project['title']}\""
    )
    return success("Project restored successfully", _view(project, level))


# =============================================================================
# Comments, activities, milestones
# =============================================================================

@router.post("/{project_id}/comments")
async def add_comment(project_id: str, data: CommentCreate, auth: AuthContext = Depends(get_auth_context)):
    """Add a comment (anyone with access to the project)"""
    project, _ = _load(project_id, auth)
    previous = copy.deepcopy(project)

    message = data.message.strip()
    if not message:
        raise HTTPException(status_code=400, detail="Comment message is required")

    comment = project_service.add_comment(project, auth.user, message)
    _save(project, previous)

    record_activity(
        auth.user_id, "commented", "project", project["id"], project["title"],
        f"Commented on project: \"{project['title']}\"", {"comment_id": comment["id"]}
    )
    return success("Comment added successfully", comment, status_code=201)


@router.get("/{project_id}/activities")
async def list_project_activities(project_id: str, auth: AuthContext = Depends(get_auth_context)):
    project, _ = _load(project_id, auth)
    return success(data=project.get("activities", []))


@router.post("/{project_id}/milestones")
async def add_milestone(project_id: str, data: MilestoneCreate, auth: AuthContext = Depends(get_auth_context)):
    project, _ = _load(project_id, auth, need_edit=True)
    previous = copy.deepcopy(project)

    milestone = project_service.add_milestone(
        project, auth.user, data.title.strip(), data.description, data.due_date
    )
    _save(project, previous)
    return success("Milestone added successfully", milestone, status_code=201)


@router.patch("/{project_id}/milestones/{milestone_id}")
async def update_milestone(
    project_id: str,
    milestone_id: str,
    data: MilestoneUpdate,
    auth: AuthContext = Depends(get_auth_context)
):
    project, _ = _load(project_id, auth, need_edit=True)
    previous = copy.deepcopy(project)

    milestone = project_service.update_milestone(
        project, auth.user, milestone_id, title=data.title, completed=data.completed
    )
    if milestone is None:
        raise HTTPException(status_code=404, detail="Milestone not found")

    _save(project, previous)
    return success("Milestone updated successfully", milestone)
