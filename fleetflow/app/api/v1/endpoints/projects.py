"""
Project API Endpoints.

Projects are the cost centres trips are booked against. Trips reference a
project by name, so deleting a project leaves existing trips untouched.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fleetflow.app.db.session import get_db
from fleetflow.app.models.project import Project
from fleetflow.app.schemas.project import ProjectCreate, ProjectResponse, ProjectListResponse
from fleetflow.app.core.dependencies import get_current_user
from fleetflow.app.core.guards import require_admin
from fleetflow.app.services.audit import log_user_action, AuditAction

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(Project).order_by(Project.name))
    projects = result.scalars().all()

    return ProjectListResponse(
        projects=[ProjectResponse.model_validate(p) for p in projects],
        total=len(projects)
    )


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Add a project (admin-only)."""
    name = project_data.name.strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Project name cannot be blank"
        )

    existing = await db.execute(select(Project).where(Project.name == name))
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Project '{name}' already exists"
        )

    project = Project(name=name)
    db.add(project)
    await db.flush()

    await log_user_action(db, admin, AuditAction.PROJECT_CREATED, "project", project.id, metadata={"name": name})
    await db.commit()
    await db.refresh(project)

    return ProjectResponse.model_validate(project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Remove a project from the picker (admin-only)."""
    result = await db.execute(select(Project).where(Project.id == project_id))
    project = result.scalar_one_or_none()

    if not project:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found"
        )

    await log_user_action(
        db, admin, AuditAction.PROJECT_DELETED, "project", project.id, metadata={"name": project.name}
    )
    await db.delete(project)
    await db.commit()
