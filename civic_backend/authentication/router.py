from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from civic_backend.authentication import schemas, utils, security
from civic_backend.database import DocumentStore, get_store
from civic_backend.errors import AuthenticationError

router = APIRouter(prefix="/auth", tags=["authentication"])


# Register
@router.post('/register', response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def register(user: schemas.UserCreate, store: DocumentStore = Depends(get_store)):
    new_user = utils.create_user(store, user)
    return utils.to_response(new_user)


# Login (the form's username field carries the email)
@router.post('/login', response_model=schemas.Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), store: DocumentStore = Depends(get_store)):
    user = utils.authenticate(store, form_data.username, form_data.password)
    if not user:
        raise AuthenticationError("Invalid email or password")

    access_token = security.create_access_token(data={"sub": user["_id"], "role": user["role"]})
    return {"access_token": access_token, "token_type": "bearer"}


# Who Am I
@router.get("/whoami", response_model=schemas.CurrentUser)
def whoami(current_user: schemas.CurrentUser = Depends(security.get_current_user)):
    return current_user
