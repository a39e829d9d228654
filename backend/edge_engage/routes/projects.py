from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import desc
from sqlalchemy.orm import Session

from edge_engage.core.database import get_db
from edge_engage.dependencies.auth import get_current_user
from edge_engage.models.project import Project
from edge_engage.models.user import User
from edge_engage.schemas.project import ProjectOut

router = APIRouter(prefix="/projects", tags=["projects"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=list[ProjectOut])
def list_projects(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return (
        db.query(Project)
        .filter(Project.created_by == user.id)
        .order_by(desc(Project.updated_at), desc(Project.id))
        .all()
    )


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(project_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    project = db.query(Project).filter(Project.id == project_id, Project.created_by == user.id).first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project
