"""API version 1 router: welcome message plus the account sub-routes."""

from fastapi import APIRouter

from account_api.routers import account as account_router

WELCOME_MESSAGE = "Hooray! Welcome to version 1 of this very simple RESTful API!"

router = APIRouter(prefix="/api/v1", tags=["v1"])


@router.get("/")
def welcome():
    return {"message": WELCOME_MESSAGE}


router.include_router(account_router.router)
