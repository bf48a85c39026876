"""FastAPI application and route handlers."""

import sys
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, Any

from fastapi import Depends, FastAPI, File, Form, Request, Response, UploadFile, status
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from loguru import logger

from .config import Settings, settings
from .exceptions import (
    LinkGenError,
    NotFoundError,
    SlugTakenError,
    StorageError,
    ValidationError,
)
from .links import LinkService
from .middleware import add_request_id
from .storage import create_blob_store, create_cache, create_repository, local_files_path
from .types import UploadedFile

SLUG_TAKEN_MESSAGE = "Slug already exists. Choose another."
SAVE_ERROR_MESSAGE = "Error saving link."
MISSING_FIELDS_MESSAGE = "Name and slug are required."

templates = Jinja2Templates(directory=Path(__file__).parent / "templates")


def configure_logging(config: Settings | None = None) -> None:
    """Configure logging - should be called at startup, not import time."""
    config = config or settings
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=config.log_level,
        serialize=False,
    )
    if config.log_file:
        logger.add(
            config.log_file,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            level=config.log_level,
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    config: Settings = getattr(app.state, "settings", settings)
    configure_logging(config)

    repository = create_repository(config=config)
    blob_store = create_blob_store(config)
    cache = create_cache(config)

    try:
        await repository.startup()
        await blob_store.startup()
        await cache.startup()
    except Exception as e:
        logger.error(f"Application startup failed: {e}")
        raise

    app.state.link_service = LinkService(
        repository=repository,
        blob_store=blob_store,
        cache=cache,
    )
    logger.info("Application started successfully")

    yield

    await cache.shutdown()
    await blob_store.shutdown()
    await repository.shutdown()
    app.state.link_service = None
    logger.info("Application shutdown complete")


def get_link_service(request: Request) -> LinkService:
    """Get the link service created by the lifespan."""
    service = getattr(request.app.state, "link_service", None)
    if service is None:
        raise RuntimeError("Service not initialized")
    return service


def request_base_url(request: Request) -> str:
    """``scheme://host`` of the request, unless a public base URL is configured."""
    config: Settings = getattr(request.app.state, "settings", settings)
    if config.public_base_url:
        return config.public_base_url
    host = request.headers.get("host") or request.url.netloc
    return f"{request.url.scheme}://{host}"


def render_form(request: Request, personalized_link: str = "", error: str = "") -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "index.html",
        {"personalized_link": personalized_link, "error": error},
    )


async def read_upload(file: UploadFile | None) -> UploadedFile | None:
    """Read an optional multipart file; browsers send an empty part when none is chosen."""
    if file is None or not file.filename:
        return None
    return {
        "filename": file.filename,
        "content": await file.read(),
        "content_type": file.content_type,
    }


async def index_page(request: Request) -> HTMLResponse:
    """Render the empty submission form."""
    return render_form(request)


async def create_link(
    request: Request,
    service: Annotated[LinkService, Depends(get_link_service)],
    name: Annotated[str, Form()] = "",
    slug: Annotated[str, Form()] = "",
    note: Annotated[str, Form()] = "",
    file: Annotated[UploadFile | None, File()] = None,
) -> HTMLResponse:
    """Create a link from the submitted form and render the result."""
    try:
        upload = await read_upload(file)
        personalized_link = await service.create(
            slug,
            name,
            note,
            upload,
            base_url=request_base_url(request),
        )
    except ValidationError:
        return render_form(request, error=MISSING_FIELDS_MESSAGE)
    except SlugTakenError as e:
        logger.info(f"Rejected create: {e}")
        return render_form(request, error=SLUG_TAKEN_MESSAGE)
    except StorageError as e:
        logger.error(f"Storage error: {e}")
        return render_form(request, error=SAVE_ERROR_MESSAGE)
    finally:
        if file is not None:
            await file.close()

    return render_form(request, personalized_link=personalized_link)


async def view_link(
    request: Request,
    slug: str,
    service: Annotated[LinkService, Depends(get_link_service)],
) -> Response:
    """Render the personalized page for a slug."""
    try:
        record = await service.lookup(slug)
    except NotFoundError:
        return PlainTextResponse("Link not found", status_code=status.HTTP_404_NOT_FOUND)
    except StorageError as e:
        logger.error(f"Error retrieving link {slug}: {e}")
        return PlainTextResponse(
            "Error retrieving link", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return templates.TemplateResponse(
        request,
        "personal.html",
        {"name": record.name, "note": record.note, "file_url": record.file_url},
    )


async def health_endpoint(
    response: Response,
    service: Annotated[LinkService, Depends(get_link_service)],
) -> dict[str, Any]:
    """Check health status of all components."""
    services = await service.health_check()
    all_healthy = all(services.values())

    if not all_healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "status": "healthy" if all_healthy else "unhealthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "services": services,
    }


async def link_gen_exception_handler(request: Request, exc: LinkGenError) -> PlainTextResponse:
    """Handle domain errors that escaped a route."""
    logger.error(f"Unhandled link generator error: {exc}")
    return PlainTextResponse(
        "Internal server error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def create_app(config: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or settings

    app = FastAPI(
        title="Personalized Link Generator",
        version="1.0.0",
        description="Create shareable personalized pages",
        lifespan=lifespan,
    )
    app.state.settings = config

    app.middleware("http")(add_request_id)
    app.add_exception_handler(LinkGenError, link_gen_exception_handler)  # type: ignore[arg-type]

    app.get("/", response_class=HTMLResponse, tags=["links"])(index_page)
    app.post("/create", response_class=HTMLResponse, tags=["links"])(create_link)
    app.get("/link/{slug}", tags=["links"])(view_link)
    app.get("/health", tags=["health"])(health_endpoint)

    if not config.blob_bucket:
        app.mount(
            local_files_path(config),
            StaticFiles(directory=config.blob_local_dir, check_dir=False),
            name="files",
        )

    return app


app = create_app()
