# shopapi/routes/auth.py
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from shopapi.database import get_db
from shopapi.errors import ShopError
from shopapi.models.users import User
from shopapi.schemas import user as schemas
from shopapi.services import accounts
from shopapi.utils.audit import write_log, client_ip
from shopapi.utils.tokenJWT import get_current_user

router = APIRouter(tags=["Auth"])


# Register a new user
@router.post("/register", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.AuthRequest, request: Request, db: Session = Depends(get_db)):
    try:
        new_user = accounts.register(db, payload.email, payload.password)
    except ShopError as exc:
        write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": payload.email, "reason": exc.kind.value})
        raise

    # Log successful registration event
    write_log(db, user_id=new_user.id, action="REGISTER", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"email": new_user.email})
    return new_user


# Authenticate user and issue JWT tokens
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.AuthRequest, request: Request, db: Session = Depends(get_db)):
    try:
        user, access_token, refresh_token = accounts.login(db, payload.email, payload.password)
    except ShopError:
        write_log(db, user_id=None, action="LOGIN", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": payload.email})
        raise

    write_log(db, user_id=user.id, action="LOGIN", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"email": user.email})
    return {"access_token": access_token, "refresh_token": refresh_token, "token_type": "bearer"}


# Invalidate the refresh sessions of the current user
@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(request: Request, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    accounts.logout(db, current_user.id)
    write_log(db, user_id=current_user.id, action="LOGOUT", resource="auth", status="SUCCESS",
              ip=client_ip(request))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
