from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from .. import schemas

router = APIRouter(tags=["pages"])

WELCOME = "Welcome to the Users API! Available endpoints: GET/POST/PUT/DELETE /api/users"


@router.get("/", response_class=PlainTextResponse)
def home():
    return WELCOME + "\n"


@router.get("/api", response_model=schemas.MessageOut)
def api_root():
    """Greeting used by the bundled static page."""
    return {"message": WELCOME}
