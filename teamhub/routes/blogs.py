"""Blog routes"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from teamhub.auth.unified import AuthContext, get_auth_context
from teamhub.models.content import BlogCreate, BlogUpdate
from teamhub.responses import success
from teamhub.services.activity import record_activity
from teamhub.services.content import content_stats, list_authors, list_published, missing_roles, role_summary
from teamhub.services.database import db, Q
from teamhub.services.projects import iso

logger = logging.getLogger(__name__)
router = APIRouter()


def blog_view(blog: dict) -> dict:
    return {**blog, "author": role_summary(blog.get("author"))}


@router.get("")
async def list_blogs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = "",
    filter: str = Query("all", pattern="^(all|recent)$"),
    author: str = "",
    sort_by: str = "date_published",
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
):
    """Published blogs"""
    blogs, pagination = list_published(
        db.blogs, search, filter, author, sort_by, sort_order, page, limit
    )
    return success(
        "Blogs retrieved successfully",
        [blog_view(b) for b in blogs],
        pagination=pagination
    )


@router.get("/stats")
async def blog_stats():
    return success("Blog statistics retrieved successfully", content_stats(db.blogs))


@router.get("/authors")
async def blog_authors():
    return success("Authors retrieved successfully", list_authors())


@router.get("/{blog_id}")
async def get_blog(blog_id: str):
    """Get a blog; each read counts as a view"""
    blog = db.get_by_id(db.blogs, blog_id)
    if not blog:
        raise HTTPException(status_code=404, detail="Blog not found")

    blog["views"] = blog.get("views", 0) + 1
    db.blogs.update({"views": blog["views"]}, Q.id == blog_id)
    return success("Blog retrieved successfully", blog_view(blog))


@router.post("")
async def create_blog(data: BlogCreate, auth: AuthContext = Depends(get_auth_context)):
    if missing_roles([data.author]):
        raise HTTPException(status_code=400, detail="Invalid author ID. Author must exist in the system.")

    now = db.timestamp()
    blog = {
        "id": db.generate_id(),
        "title": data.title.strip(),
        "content": data.content.strip(),
        "author": data.author,
        "date_published": iso(data.date_published) or now,
        "links": [link.model_dump() for link in data.links],
        "tags": data.tags,
        "is_published": True,
        "views": 0,
        "created_by": auth.user_id,
        "created_at": now,
        "updated_at": now,
    }
    db.blogs.insert(blog)

    record_activity(
        auth.user_id, "created", "blog", blog["id"], blog["title"],
        f"Created blog post: \"{blog['title']}\""
    )
    return success("Blog created successfully", blog_view(blog), status_code=201)


@router.put("/{blog_id}")
async def update_blog(blog_id: str, data: BlogUpdate, auth: AuthContext = Depends(get_auth_context)):
    blog = db.get_by_id(db.blogs, blog_id)
    if not blog:
        raise HTTPException(status_code=404, detail="Blog not found")

    if data.author and data.author != blog.get("author") and missing_roles([data.author]):
        raise HTTPException(status_code=400, detail="Invalid author ID. Author must exist in the system.")

    updates = {}
    if data.title:
        updates["title"] = data.title.strip()
    if data.content:
        updates["content"] = data.content.strip()
    if data.author:
        updates["author"] = data.author
    if data.date_published:
        updates["date_published"] = iso(data.date_published)
    if data.links is not None:
        updates["links"] = [link.model_dump() for link in data.links]
    if data.tags is not None:
        updates["tags"] = data.tags
    if data.is_published is not None:
        updates["is_published"] = data.is_published
    updates["updated_at"] = db.timestamp()

    db.blogs.update(updates, Q.id == blog_id)
    blog.update(updates)

    record_activity(
        auth.user_id, "updated", "blog", blog_id, blog["title"],
        f"Updated blog post: \"{blog['title']}\""
    )
    return success("Blog updated successfully", blog_view(blog))


@router.delete("/{blog_id}")
async def delete_blog(blog_id: str, auth: AuthContext = Depends(get_auth_context)):
    blog = db.get_by_id(db.blogs, blog_id)
    if not blog:
        raise HTTPException(status_code=404, detail="Blog not found")

    db.blogs.remove(Q.id == blog_id)
    record_activity(
        auth.user_id, "deleted", "blog", blog_id, blog["title"],
        f"Deleted blog post: \"{blog['title']}\""
    )
    return success("Blog deleted successfully", blog_view(blog))
