"""
Public site content: blog posts, projects, testimonials, carousel and branding.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query

from kssv.config import get_settings
from kssv.db import DbClient, ListQuery, utcnow
from kssv.dependencies import get_db_client
from kssv.routes.common import (
    clean_filters,
    create_row,
    delete_row,
    get_or_404,
    update_row,
)
from kssv.schemas import (
    BlogPayload,
    BrandingPayload,
    CarouselImagePayload,
    DeleteResponse,
    ProjectPage,
    ProjectPayload,
    TestimonialPayload,
)

logger = logging.getLogger(__name__)

router = APIRouter()

PROJECT_SEARCH_COLUMNS = ("title", "description", "location")


def _viewed(db: DbClient, table: str, row_id: str, entity: str) -> dict:
    row = get_or_404(db, table, row_id, entity)
    db.increment(table, row_id, "views")
    row["views"] = (row.get("views") or 0) + 1
    return row


# Blog


@router.get("/blog")
def list_blog_posts(
    status: str = Query("published"),
    category: Optional[str] = None,
    db: DbClient = Depends(get_db_client),
):
    return db.list(
        "blog",
        ListQuery(filters=clean_filters(status=status, category=category), order_by="date"),
    )


@router.post("/blog", status_code=201)
def create_blog_post(payload: BlogPayload, db: DbClient = Depends(get_db_client)):
    return create_row(db, "blog", payload, required=("title", "content"))


@router.get("/blog/{post_id}")
def get_blog_post(post_id: str, db: DbClient = Depends(get_db_client)):
    return _viewed(db, "blog", post_id, "Blog post")


@router.put("/blog/{post_id}")
def update_blog_post(
    post_id: str, payload: BlogPayload, db: DbClient = Depends(get_db_client)
):
    return update_row(
        db, "blog", post_id, payload, "Blog post", required=("title", "content")
    )


@router.delete("/blog/{post_id}", response_model=DeleteResponse)
def delete_blog_post(post_id: str, db: DbClient = Depends(get_db_client)):
    return delete_row(db, "blog", post_id, "Blog post")


# Projects


@router.get("/projects", response_model=ProjectPage)
def list_projects(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    category: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    db: DbClient = Depends(get_db_client),
):
    limit = limit or get_settings().projects_page_size
    query = ListQuery(
        filters=clean_filters(category=category, status=status),
        search=search or None,
        search_columns=PROJECT_SEARCH_COLUMNS,
        limit=limit,
        offset=(page - 1) * limit,
    )
    total = db.count("projects", query)
    total_pages = math.ceil(total / limit) if total else 0
    return ProjectPage(
        projects=db.list("projects", query),
        total=total,
        page=page,
        totalPages=total_pages,
        hasMore=page < total_pages,
    )


@router.post("/projects", status_code=201)
def create_project(payload: ProjectPayload, db: DbClient = Depends(get_db_client)):
    settings = get_settings()
    return create_row(
        db,
        "projects",
        payload,
        required=("title", "description"),
        defaults={"date": utcnow(), "location": settings.default_location},
    )


@router.get("/projects/{project_id}")
def get_project(project_id: str, db: DbClient = Depends(get_db_client)):
    return _viewed(db, "projects", project_id, "Project")


@router.put("/projects/{project_id}")
def update_project(
    project_id: str, payload: ProjectPayload, db: DbClient = Depends(get_db_client)
):
    return update_row(
        db,
        "projects",
        project_id,
        payload,
        "Project",
        required=("title", "description"),
    )


@router.delete("/projects/{project_id}", response_model=DeleteResponse)
def delete_project(project_id: str, db: DbClient = Depends(get_db_client)):
    return delete_row(db, "projects", project_id, "Project")


# Testimonials


@router.get("/testimonials")
def list_testimonials(
    approved: Optional[bool] = None, db: DbClient = Depends(get_db_client)
):
    filters = {"approved": True} if approved else {}
    return db.list("testimonials", ListQuery(filters=filters))


@router.post("/testimonials", status_code=201)
def create_testimonial(
    payload: TestimonialPayload, db: DbClient = Depends(get_db_client)
):
    return create_row(db, "testimonials", payload, required=("name", "message"))


@router.put("/testimonials/{testimonial_id}")
def update_testimonial(
    testimonial_id: str,
    payload: TestimonialPayload,
    db: DbClient = Depends(get_db_client),
):
    return update_row(
        db,
        "testimonials",
        testimonial_id,
        payload,
        "Testimonial",
        required=("name", "message"),
    )


@router.delete("/testimonials/{testimonial_id}", response_model=DeleteResponse)
def delete_testimonial(testimonial_id: str, db: DbClient = Depends(get_db_client)):
    return delete_row(db, "testimonials", testimonial_id, "Testimonial")


# Carousel


@router.get("/carousel")
def list_carousel_images(db: DbClient = Depends(get_db_client)):
    return db.list("carousel_images", ListQuery(order_by="order_index", descending=False))


@router.post("/carousel", status_code=201)
def create_carousel_image(
    payload: CarouselImagePayload, db: DbClient = Depends(get_db_client)
):
    return create_row(db, "carousel_images", payload, required=("image_url",))


@router.put("/carousel/{image_id}")
def update_carousel_image(
    image_id: str,
    payload: CarouselImagePayload,
    db: DbClient = Depends(get_db_client),
):
    return update_row(
        db, "carousel_images", image_id, payload, "Image", required=("image_url",)
    )


@router.delete("/carousel/{image_id}", response_model=DeleteResponse)
def delete_carousel_image(image_id: str, db: DbClient = Depends(get_db_client)):
    return delete_row(db, "carousel_images", image_id, "Image")


# Branding


@router.get("/branding")
def get_branding(db: DbClient = Depends(get_db_client)):
    rows = db.list("branding", ListQuery(order_by="updated_at", limit=1))
    return rows[0] if rows else {}


@router.post("/branding", status_code=201)
def save_branding(payload: BrandingPayload, db: DbClient = Depends(get_db_client)):
    """Update the branding row named by ``id`` when it exists, otherwise insert one."""
    values = payload.create_values()
    branding_id = values.pop("id", None)
    if branding_id and db.get("branding", branding_id):
        row = db.update("branding", branding_id, values)
        logger.info("Updated branding %s", branding_id)
        return row
    if branding_id:
        values["id"] = branding_id
    row = db.insert("branding", values)
    logger.info("Created branding %s", row["id"])
    return row
