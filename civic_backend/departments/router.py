from fastapi import APIRouter, Depends, Query, status
from typing import List

from civic_backend.access import Action, Resource, authorize, ensure_allowed, is_admin
from civic_backend.authentication.security import get_current_user, get_optional_user
from civic_backend.database import DocumentStore, get_store, public
from civic_backend.departments import schemas, utils
from civic_backend.errors import NotFoundError

router = APIRouter(prefix="/departments", tags=["Departments"])


@router.get("", response_model=List[schemas.Department])
def list_departments(
    include_inactive: bool = Query(False, description="Admins only: also list inactive departments"),
    current_user=Depends(get_optional_user),
    store: DocumentStore = Depends(get_store),
):
    """Active departments for everyone; admins may ask for inactive ones too."""
    show_all = include_inactive and is_admin(current_user)
    return [public(d) for d in utils.list_departments(store, include_inactive=show_all)]


@router.get("/{department_id}", response_model=schemas.Department)
def get_department(department_id: str, current_user=Depends(get_optional_user),
                   store: DocumentStore = Depends(get_store)):
    department = utils.get_department(store, department_id)
    if not authorize(current_user, Resource.DEPARTMENT, Action.READ, active=department.get("active", True)):
        raise NotFoundError("Department not found")
    return public(department)


@router.post("", response_model=schemas.Department, status_code=status.HTTP_201_CREATED)
def create_department(data: schemas.DepartmentCreate, current_user=Depends(get_current_user),
                      store: DocumentStore = Depends(get_store)):
    ensure_allowed(current_user, Resource.DEPARTMENT, Action.CREATE,
                   message="You must be an admin to create departments")
    return public(utils.create_department(store, data))


@router.patch("/{department_id}", response_model=schemas.Department)
def update_department(department_id: str, updates: schemas.DepartmentUpdate,
                      current_user=Depends(get_current_user), store: DocumentStore = Depends(get_store)):
    ensure_allowed(current_user, Resource.DEPARTMENT, Action.UPDATE,
                   message="You must be an admin to update departments")
    return public(utils.update_department(store, department_id, updates))


@router.delete("/{department_id}")
def delete_department(department_id: str, current_user=Depends(get_current_user),
                      store: DocumentStore = Depends(get_store)):
    ensure_allowed(current_user, Resource.DEPARTMENT, Action.DELETE,
                   message="You must be an admin to delete departments")
    utils.delete_department(store, department_id)
    return {"message": "Department deleted successfully"}
