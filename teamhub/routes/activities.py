"""Activity log routes"""

from fastapi import APIRouter, Depends, HTTPException, Query

from teamhub.auth.unified import AuthContext, get_auth_context
from teamhub.responses import success
from teamhub.services.activity import ENTITY_TYPES, describe
from teamhub.services.database import db, Q

router = APIRouter()


def _newest(docs, limit: int) -> list:
    # insertion order breaks timestamp ties
    ordered = sorted(enumerate(docs), key=lambda pair: (pair[1].get("created_at", ""), pair[0]), reverse=True)
    return [describe(doc) for _, doc in ordered[:limit]]


@router.get("/recent")
async def recent_activities(
    limit: int = Query(10, ge=1, le=100),
    auth: AuthContext = Depends(get_auth_context)
):
    """Latest activities across all resources"""
    return success(data=_newest(db.activities.all(), limit))


@router.get("/entity/{entity_type}/{entity_id}")
async def entity_activities(
    entity_type: str,
    entity_id: str,
    limit: int = Query(20, ge=1, le=100),
    auth: AuthContext = Depends(get_auth_context)
):
    if entity_type not in ENTITY_TYPES:
        raise HTTPException(status_code=400, detail=f"Invalid entity type: {entity_type}")

    docs = db.activities.search((Q.entity_type == entity_type) & (Q.entity_id == entity_id))
    return success(data=_newest(docs, limit))


@router.get("/user/{user_id}")
async def user_activities(
    user_id: str,
    limit: int = Query(20, ge=1, le=100),
    auth: AuthContext = Depends(get_auth_context)
):
    docs = db.activities.search(Q.user_id == user_id)
    return success(data=_newest(docs, limit))
