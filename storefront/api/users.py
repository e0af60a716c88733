from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from storefront.api.deps import get_db, require_role
from storefront.api.schemas import UserListResponse, UserPublic
from storefront.db.models import Role
from storefront.services.users import UserStore

router = APIRouter()

@router.get("/", response_model=UserListResponse, dependencies=[Depends(require_role(Role.ADMIN))])
def list_users(db: Session = Depends(get_db)):
    return UserListResponse(data=[UserPublic.model_validate(u) for u in UserStore(db).all()])
