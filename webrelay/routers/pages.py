from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

router = APIRouter(tags=["pages"])

INDEX_PATH = "/index.html"


@router.get("/")
async def root():
    return RedirectResponse(url=INDEX_PATH, status_code=302)


@router.get("/public")
@router.get("/public/{path:path}")
async def public_alias(request: Request, path: str = ""):
    """Old links pointed at /public/...; the files are served from the root now."""
    # Collapse leading slashes so "/public//host" can't become a protocol-relative URL
    path = path.lstrip("/")
    target = f"/{path}" if path else INDEX_PATH
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return RedirectResponse(url=target, status_code=302)
