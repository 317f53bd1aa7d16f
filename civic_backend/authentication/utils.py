"""
User lookups and persistence on top of the document store.
"""

from typing import Dict, Optional

from civic_backend.authentication import schemas, security
from civic_backend.database import DocumentStore, utcnow
from civic_backend import config
from civic_backend.errors import ConflictError, ValidationError


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(store: DocumentStore, email: str) -> Optional[Dict]:
    return store.find_one("users", {"email": normalize_email(email)})


def create_user(store: DocumentStore, user: schemas.UserCreate) -> Dict:
    """Register a user; a valid admin code grants the admin role."""
    if get_user_by_email(store, user.email):
        raise ConflictError("User with this email already exists")

    role = schemas.UserRole.CITIZEN
    if user.admin_code:
        if user.admin_code != config.ADMIN_REGISTRATION_CODE:
            raise ValidationError("Invalid admin code")
        role = schemas.UserRole.ADMIN

    return store.insert("users", {
        "name": user.name,
        "email": normalize_email(user.email),
        "hashed_password": security.hash_password(user.password),
        "role": role.value,
        "phone": user.phone or "",
        "notifications": [],
        "created_at": utcnow(),
    })


def authenticate(store: DocumentStore, email: str, password: str) -> Optional[Dict]:
    user = get_user_by_email(store, email)
    if not user or not security.verify_password(password, user["hashed_password"]):
        return None
    return user


def to_response(user: Dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        user_id=user["_id"],
        name=user["name"],
        email=user["email"],
        role=user["role"],
        phone=user.get("phone", ""),
    )
