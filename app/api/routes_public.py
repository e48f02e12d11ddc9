"""
Public routes - no credential required
"""

import os

from fastapi import APIRouter, Form, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from app.core.gate import LOGIN_PATH
from app.core.session import SessionContext, end_session, start_session

router = APIRouter()

templates = Jinja2Templates(
    directory=os.path.join(os.path.dirname(__file__), "..", "..", "templates")
)

def safe_next(target: str) -> str:
    """Only follow redirects to local paths"""
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return "/dashboard"

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}

@router.get("/")
async def root():
    return RedirectResponse(url="/dashboard", status_code=303)

@router.get("/login")
async def login_page(request: Request, next: str = "/dashboard"):
    """Sign-in page"""
    return templates.TemplateResponse(
        request,
        "login.html",
        {"title": "Sign in", "next": safe_next(next), "error": None}
    )

@router.post("/login")
async def login(
    request: Request,
    token: str = Form(...),
    next: str = Form("/dashboard")
):
    """Start a session from a credential issued by the upstream API"""
    session = SessionContext.from_token(token.strip())
    if not session.is_authenticated:
        return templates.TemplateResponse(
            request,
            "login.html",
            {"title": "Sign in", "next": safe_next(next), "error": "Invalid or expired credential"},
            status_code=400
        )

    response = RedirectResponse(url=safe_next(next), status_code=303)
    start_session(response, session.token)
    return response

@router.get("/logout")
async def logout():
    """End the session"""
    response = RedirectResponse(url=LOGIN_PATH, status_code=303)
    end_session(response)
    return response

@router.get("/unauthorized")
async def unauthorized(request: Request):
    """Shown when the caller's role is not admitted to a page"""
    return templates.TemplateResponse(
        request,
        "unauthorized.html",
        {"title": "Access denied"},
        status_code=403
    )
