# auth.py
"""
Bearer-token authentication.

Tokens are HS256 JWTs signed with JWT_SECRET and carry the user id as
``id``. The role and the assigned units are never read from the token;
they are loaded from the database on every request.
"""
import os

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, Request
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from database import get_session
from exceptions import NotFoundError
from services.access_scope import Actor, load_actor

load_dotenv()
SECRET_KEY = os.getenv("JWT_SECRET")
ALGORITHM = "HS256"


def create_token(user_id: int) -> str:
    return jwt.encode({"id": user_id}, SECRET_KEY, algorithm=ALGORITHM)


# Token Auth Dependency
def verify_token(request: Request):
    auth = request.headers.get("Authorization")
    if not auth or not auth.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing token")
    token = auth.split(" ")[1]
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        raise HTTPException(status_code=403, detail="Invalid token")


def get_current_actor(
    token: dict = Depends(verify_token),
    db: Session = Depends(get_session),
) -> Actor:
    user_id = token.get("id")
    if not isinstance(user_id, int):
        raise HTTPException(status_code=403, detail="Invalid token")
    try:
        return load_actor(db, user_id)
    except NotFoundError:
        raise HTTPException(status_code=401, detail="Unknown or inactive user")
