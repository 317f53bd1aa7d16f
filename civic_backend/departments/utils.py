"""
CRUD for departments. Names are unique (case-insensitive).
"""

from typing import Dict, List, Optional

from civic_backend.database import DocumentStore, check_id, utcnow
from civic_backend.departments import schemas
from civic_backend.errors import ConflictError, NotFoundError


def _name_taken(store: DocumentStore, name: str, exclude_id: Optional[str] = None) -> bool:
    wanted = name.strip().lower()
    return store.find_one(
        "departments",
        where=lambda d: d["name"].lower() == wanted and d["_id"] != exclude_id,
    ) is not None


def list_departments(store: DocumentStore, include_inactive: bool = False) -> List[Dict]:
    query = None if include_inactive else {"active": True}
    departments = store.find("departments", query)
    departments.sort(key=lambda d: d["name"].lower())
    return departments


def get_department(store: DocumentStore, department_id: str) -> Dict:
    check_id(department_id, "department ID")
    department = store.get("departments", department_id)
    if not department:
        raise NotFoundError("Department not found")
    return department


def create_department(store: DocumentStore, data: schemas.DepartmentCreate) -> Dict:
    if _name_taken(store, data.name):
        raise ConflictError("A department with this name already exists")
    doc = data.dict()
    doc["created_at"] = utcnow()
    return store.insert("departments", doc)


def update_department(store: DocumentStore, department_id: str, updates: schemas.DepartmentUpdate) -> Dict:
    department = get_department(store, department_id)
    changes = updates.dict(exclude_unset=True)
    if "name" in changes and _name_taken(store, changes["name"], exclude_id=department["_id"]):
        raise ConflictError("A department with this name already exists")
    if not changes:
        return department
    return store.update("departments", department["_id"], changes)


def delete_department(store: DocumentStore, department_id: str) -> None:
    department = get_department(store, department_id)
    store.delete("departments", department["_id"])
