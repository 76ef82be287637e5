"""
FastAPI Application Entry Point

Scan2Dine - digital menus with QR codes and WhatsApp ordering.

Endpoints:
    - GET  /: Landing page
    - GET/POST /login, /signup, /onboarding: Owner account flow
    - GET  /dashboard: Owner editor (menu, qr, theme, settings tabs)
    - POST /dashboard/...: Editor actions
    - POST /logout: End the owner session
    - GET  /menu/{restaurant_id}: Public menu
    - GET  /api/menu/{restaurant_id}: Public menu as JSON
    - GET  /health: System health check

Author: Khalil_Bannouri
Version: 1.0.0
"""

import asyncio
import sys
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ValidationError
from starlette.middleware.sessions import SessionMiddleware

# Windows-specific event loop policy
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Internal imports
from scan2dine.core.config import DataBackend, get_settings, setup_logging
from scan2dine.core.exceptions import (
    AuthError,
    BackendError,
    ConflictError,
    DraftValidationError,
    EncodingError,
)
from scan2dine.database import dispose_engine, init_db
from scan2dine.schemas import (
    FONT_FAMILIES,
    ErrorResponse,
    HealthResponse,
    LoginDraft,
    MenuItemDraft,
    OnboardingDraft,
    PublicMenuResponse,
    RestaurantDraft,
    SignupDraft,
    ThemeDraft,
)
from scan2dine.services.accounts import (
    OwnerSession,
    authenticate_owner,
    end_session,
    register_owner,
)
from scan2dine.services.auth import BaseAuthService, get_auth_service
from scan2dine.services.editor import AdminEditor, DashboardTab, Flash
from scan2dine.services.gateway import BaseMenuGateway, get_menu_gateway
from scan2dine.services.ordering import format_price
from scan2dine.services.public_menu import MenuState, load_public_menu

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

# Template configuration
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
templates.env.globals["app_name"] = settings.app_name
templates.env.globals["format_price"] = format_price

SESSION_OWNER_KEY = "owner"
SESSION_FLASH_KEY = "flash"
SESSION_QR_KEY = "qr_generated"


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    if settings.data_backend == DataBackend.SQL:
        await init_db()
        logger.info("✅ Database initialized")

    gateway = get_menu_gateway()
    auth_service = get_auth_service()
    logger.info(f"✅ Data Store: {gateway.provider_name}")
    logger.info(f"✅ Auth Service: {auth_service.provider_name}")

    # Validate production config
    missing = settings.validate_production_config()
    if missing:
        logger.warning(f"⚠️ Missing production config: {missing}")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    if settings.data_backend == DataBackend.SQL:
        await dispose_engine()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Digital menus for restaurants: owners edit their menu and print a QR code, "
        "diners browse the menu and order over WhatsApp."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (public menu JSON is embeddable)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    max_age=settings.session_max_age,
    same_site="lax",
    https_only=settings.use_real_services,
)


# =============================================================================
# DEPENDENCIES
# =============================================================================

class LoginRequired(Exception):
    """Raised by require_session; answered with a redirect to /login."""


def get_gateway() -> BaseMenuGateway:
    return get_menu_gateway()


def get_auth() -> BaseAuthService:
    return get_auth_service()


def current_session(request: Request) -> Optional[OwnerSession]:
    return OwnerSession.from_dict(request.session.get(SESSION_OWNER_KEY))


def require_session(request: Request) -> OwnerSession:
    session = current_session(request)
    if session is None:
        raise LoginRequired()
    return session


def request_origin(request: Request) -> str:
    """Origin printed into QR codes: PUBLIC_BASE_URL, else the request's own."""
    if settings.public_base_url:
        return settings.public_base_url.rstrip("/")
    return str(request.base_url).rstrip("/")


def get_editor(
    request: Request,
    session: OwnerSession = Depends(require_session),
    gateway: BaseMenuGateway = Depends(get_gateway),
) -> AdminEditor:
    return AdminEditor(session, gateway, request_origin(request))


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

async def parse_form(request: Request, model: type[BaseModel], **overrides: Any) -> Any:
    """Validate a submitted form into a draft; raises DraftValidationError."""
    form = await request.form()
    data = {key: value for key, value in form.items() if isinstance(value, str)}
    data.update(overrides)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise DraftValidationError.from_pydantic(e) from e


def flash(request: Request, kind: str, message: str) -> None:
    request.session[SESSION_FLASH_KEY] = Flash(kind=kind, message=message).to_dict()


def pop_flash(request: Request) -> Optional[Flash]:
    return Flash.from_dict(request.session.pop(SESSION_FLASH_KEY, None))


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


def dashboard_redirect(tab: DashboardTab) -> RedirectResponse:
    return redirect(f"/dashboard?tab={tab.value}")


def optional_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value else None
    except ValueError:
        return None


def write_error_message(exc: BackendError, action: str) -> str:
    if isinstance(exc, ConflictError):
        return f"Could not {action}: it was changed in another session. Reload and try again."
    return f"Error trying to {action}. Please try again."


async def render_dashboard(
    request: Request,
    editor: AdminEditor,
    tab: DashboardTab,
    *,
    edit_id: Optional[str] = None,
    form_values: Optional[dict[str, Any]] = None,
    field_errors: Optional[dict[str, str]] = None,
    status_code: int = 200,
) -> HTMLResponse:
    state = await editor.load(tab)

    qr_image = None
    qr_error = None
    if tab == DashboardTab.QR and request.session.get(SESSION_QR_KEY):
        try:
            qr_image = editor.generate_qr()
        except EncodingError as e:
            qr_error = str(e)

    editing_item = state.find_item(edit_id)
    if form_values is None:
        form_values = {}
        if editing_item is not None:
            form_values = MenuItemDraft.from_item(editing_item).model_dump()

    theme = ThemeDraft.from_theme(state.restaurant.theme if state.restaurant else {})
    settings_form = RestaurantDraft.from_restaurant(state.restaurant) if state.restaurant else None

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "state": state,
            "tabs": list(DashboardTab),
            "flash": pop_flash(request),
            "editing_item": editing_item,
            "form_values": form_values,
            "field_errors": field_errors or {},
            "qr_image": qr_image,
            "qr_error": qr_error,
            "theme": theme,
            "font_families": FONT_FAMILIES,
            "settings_form": settings_form,
        },
        status_code=status_code,
    )


# =============================================================================
# LANDING & AUTH PAGES
# =============================================================================

@app.get("/", response_class=HTMLResponse, tags=["Pages"])
async def landing(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "landing.html", {"session": current_session(request)}
    )


@app.get("/login", response_class=HTMLResponse, tags=["Auth"])
async def login_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "login.html", {"error": None, "email": ""})


@app.post("/login", tags=["Auth"])
async def login(
    request: Request,
    auth: BaseAuthService = Depends(get_auth),
) -> Response:
    try:
        draft = await parse_form(request, LoginDraft)
        session = await authenticate_owner(auth, draft)
    except (DraftValidationError, AuthError) as e:
        # Every failure renders the same message, whatever the provider said
        form = await request.form()
        logger.info(f"Sign-in failed: {getattr(e, 'code', None) or type(e).__name__}")
        return templates.TemplateResponse(
            request,
            "login.html",
            {"error": "Invalid email or password", "email": form.get("email", "")},
            status_code=400,
        )

    request.session.clear()
    request.session[SESSION_OWNER_KEY] = session.to_dict()
    logger.info(f"Owner signed in: {session.email}")
    return redirect("/dashboard")


@app.get("/signup", response_class=HTMLResponse, tags=["Auth"])
async def signup_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "signup.html", {"error": None, "field_errors": {}, "values": {}}
    )


@app.post("/signup", tags=["Auth"])
async def signup(
    request: Request,
    auth: BaseAuthService = Depends(get_auth),
    gateway: BaseMenuGateway = Depends(get_gateway),
) -> Response:
    form = await request.form()
    values = {k: v for k, v in form.items() if k != "password"}
    try:
        draft = await parse_form(request, SignupDraft)
        session = await register_owner(auth, gateway, draft)
    except DraftValidationError as e:
        return templates.TemplateResponse(
            request,
            "signup.html",
            {"error": None, "field_errors": e.field_errors, "values": values},
            status_code=400,
        )
    except (AuthError, BackendError) as e:
        logger.error(f"Signup failed: {e}")
        message = str(e) if isinstance(e, AuthError) else "Could not create your restaurant. Please try again."
        return templates.TemplateResponse(
            request,
            "signup.html",
            {"error": message, "field_errors": {}, "values": values},
            status_code=400,
        )

    request.session.clear()
    request.session[SESSION_OWNER_KEY] = session.to_dict()
    return redirect("/onboarding")


@app.get("/onboarding", response_class=HTMLResponse, tags=["Auth"])
async def onboarding_page(
    request: Request,
    editor: AdminEditor = Depends(get_editor),
) -> HTMLResponse:
    restaurant = await editor.reload_restaurant()
    draft = OnboardingDraft()
    return templates.TemplateResponse(
        request,
        "onboarding.html",
        {"restaurant": restaurant, "values": draft.model_dump(), "field_errors": {}, "error": None},
    )


@app.post("/onboarding", tags=["Auth"])
async def onboarding(
    request: Request,
    editor: AdminEditor = Depends(get_editor),
) -> Response:
    form = await request.form()
    categories = [c for c in str(form.get("categories", "")).splitlines()]
    values = {k: v for k, v in form.items() if k != "categories"}
    values["categories"] = categories
    try:
        draft = await parse_form(request, OnboardingDraft, categories=categories)
        await editor.complete_onboarding(draft)
    except DraftValidationError as e:
        return templates.TemplateResponse(
            request,
            "onboarding.html",
            {"restaurant": None, "values": values, "field_errors": e.field_errors, "error": None},
            status_code=400,
        )
    except BackendError as e:
        return templates.TemplateResponse(
            request,
            "onboarding.html",
            {
                "restaurant": None,
                "values": values,
                "field_errors": {},
                "error": write_error_message(e, "complete setup"),
            },
            status_code=502,
        )

    flash(request, "success", "Setup complete. Start adding your menu items!")
    return redirect("/dashboard")


@app.post("/logout", tags=["Auth"])
async def logout(
    request: Request,
    auth: BaseAuthService = Depends(get_auth),
) -> RedirectResponse:
    session = current_session(request)
    if session is not None:
        await end_session(auth, session)
    request.session.clear()
    return redirect("/")


# =============================================================================
# DASHBOARD
# =============================================================================

@app.get("/dashboard", response_class=HTMLResponse, tags=["Dashboard"])
async def dashboard(
    request: Request,
    tab: Optional[str] = Query(None),
    edit: Optional[str] = Query(None),
    editor: AdminEditor = Depends(get_editor),
) -> HTMLResponse:
    return await render_dashboard(request, editor, DashboardTab.parse(tab), edit_id=edit)


async def _save_item(request: Request, editor: AdminEditor, item_id: Optional[str]) -> Response:
    form = await request.form()
    try:
        draft = await parse_form(request, MenuItemDraft)
    except DraftValidationError as e:
        return await render_dashboard(
            request,
            editor,
            DashboardTab.MENU,
            edit_id=item_id,
            form_values=dict(form),
            field_errors=e.field_errors,
            status_code=400,
        )

    try:
        await editor.save_item(draft, item_id, optional_int(form.get("version")))
    except BackendError as e:
        flash(request, "error", write_error_message(e, "save the menu item"))
        return dashboard_redirect(DashboardTab.MENU)

    flash(request, "success", "Menu item updated" if item_id else "Menu item added")
    return dashboard_redirect(DashboardTab.MENU)


@app.post("/dashboard/items", tags=["Dashboard"])
async def add_item(request: Request, editor: AdminEditor = Depends(get_editor)) -> Response:
    return await _save_item(request, editor, None)


@app.post("/dashboard/items/{item_id}", tags=["Dashboard"])
async def update_item(
    item_id: str,
    request: Request,
    editor: AdminEditor = Depends(get_editor),
) -> Response:
    return await _save_item(request, editor, item_id)


@app.post("/dashboard/items/{item_id}/delete", tags=["Dashboard"])
async def delete_item(
    item_id: str,
    request: Request,
    editor: AdminEditor = Depends(get_editor),
) -> RedirectResponse:
    form = await request.form()
    confirmed = form.get("confirm") in ("yes", "true", "on", "1")
    try:
        deleted = await editor.delete_item(item_id, confirmed)
    except BackendError as e:
        flash(request, "error", write_error_message(e, "delete the menu item"))
        return dashboard_redirect(DashboardTab.MENU)

    if deleted:
        flash(request, "success", "Menu item deleted")
    else:
        flash(request, "info", "Please confirm before deleting an item")
    return dashboard_redirect(DashboardTab.MENU)


@app.post("/dashboard/qr", tags=["Dashboard"])
async def generate_qr(request: Request, editor: AdminEditor = Depends(get_editor)) -> RedirectResponse:
    try:
        editor.generate_qr()
    except EncodingError as e:
        logger.error(f"Error generating QR code: {e}")
        flash(request, "error", "Failed to generate QR code")
        return dashboard_redirect(DashboardTab.QR)

    request.session[SESSION_QR_KEY] = True
    flash(request, "success", "QR Code generated successfully")
    return dashboard_redirect(DashboardTab.QR)


@app.get("/dashboard/qr/download", tags=["Dashboard"])
async def download_qr(request: Request, editor: AdminEditor = Depends(get_editor)) -> Response:
    if not request.session.get(SESSION_QR_KEY):
        flash(request, "info", "Generate your QR code first")
        return dashboard_redirect(DashboardTab.QR)

    try:
        download = await editor.qr_download()
    except EncodingError as e:
        logger.error(f"Error generating QR code for download: {e}")
        download = None

    if download is None:
        flash(request, "error", "Failed to download QR code")
        return dashboard_redirect(DashboardTab.QR)

    return Response(
        content=download.content,
        media_type=download.media_type,
        headers={"Content-Disposition": f'attachment; filename="{download.filename}"'},
    )


@app.post("/dashboard/settings", tags=["Dashboard"])
async def save_settings(request: Request, editor: AdminEditor = Depends(get_editor)) -> Response:
    form = await request.form()
    try:
        draft = await parse_form(request, RestaurantDraft)
    except DraftValidationError as e:
        flash(request, "error", f"Error updating settings: {e}")
        return dashboard_redirect(DashboardTab.SETTINGS)

    try:
        await editor.save_settings(draft, optional_int(form.get("version")))
    except BackendError as e:
        logger.error(f"Error updating settings: {e}")
        flash(request, "error", write_error_message(e, "update settings"))
        return dashboard_redirect(DashboardTab.SETTINGS)

    flash(request, "success", "Restaurant settings updated successfully!")
    return dashboard_redirect(DashboardTab.SETTINGS)


@app.post("/dashboard/theme", tags=["Dashboard"])
async def save_theme(request: Request, editor: AdminEditor = Depends(get_editor)) -> Response:
    try:
        draft = await parse_form(request, ThemeDraft)
        await editor.save_theme(draft)
    except DraftValidationError as e:
        flash(request, "error", f"Failed to update theme: {e}")
        return dashboard_redirect(DashboardTab.THEME)
    except BackendError as e:
        logger.error(f"Error updating theme: {e}")
        flash(request, "error", "Failed to update theme")
        return dashboard_redirect(DashboardTab.THEME)

    flash(request, "success", "Theme updated successfully")
    return dashboard_redirect(DashboardTab.THEME)


# =============================================================================
# PUBLIC MENU
# =============================================================================

MENU_STATUS_CODES = {
    MenuState.UNAVAILABLE: 503,
    MenuState.NOT_FOUND: 404,
    MenuState.COMING_SOON: 200,
    MenuState.READY: 200,
}


@app.get("/menu/{restaurant_id}", response_class=HTMLResponse, tags=["Public Menu"])
async def public_menu(
    restaurant_id: str,
    request: Request,
    gateway: BaseMenuGateway = Depends(get_gateway),
) -> HTMLResponse:
    menu = await load_public_menu(gateway, restaurant_id)
    theme = ThemeDraft.from_theme(menu.restaurant.theme if menu.restaurant else {})
    return templates.TemplateResponse(
        request,
        "menu.html",
        {"menu": menu, "states": MenuState, "theme": theme},
        status_code=MENU_STATUS_CODES[menu.state],
    )


@app.get(
    "/api/menu/{restaurant_id}",
    response_model=PublicMenuResponse,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    tags=["Public Menu"],
)
async def public_menu_json(
    restaurant_id: str,
    gateway: BaseMenuGateway = Depends(get_gateway),
) -> Any:
    menu = await load_public_menu(gateway, restaurant_id)
    if menu.state == MenuState.UNAVAILABLE:
        return JSONResponse(
            status_code=503,
            content=ErrorResponse(error="Menu not available").model_dump(),
        )
    if menu.state == MenuState.NOT_FOUND:
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error="Restaurant not found").model_dump(),
        )
    return menu.to_response()


# =============================================================================
# HEALTH
# =============================================================================

@app.get("/health", response_model=HealthResponse, tags=["Health"], summary="System Health Check")
async def health_check(
    gateway: BaseMenuGateway = Depends(get_gateway),
    auth: BaseAuthService = Depends(get_auth),
) -> HealthResponse:
    """Verify the data store and auth provider are reachable."""
    store_ok, auth_ok = await asyncio.gather(gateway.health_check(), auth.health_check())
    return HealthResponse(
        status="operational" if store_ok and auth_ok else "degraded",
        data_backend=gateway.provider_name,
        auth_backend=auth.provider_name,
        data_store="healthy" if store_ok else "unhealthy",
        auth_service="healthy" if auth_ok else "unhealthy",
        timestamp=datetime.now(),
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired) -> RedirectResponse:
    return redirect("/login")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )
