"""Route handlers for the default site.

Each handler declares what it needs by parameter name (``request``,
``subpaths``, ``config``, ``store``) and the request pipeline injects it.
Method checks happen in the router, so a handler only ever runs for an
allowed method.
"""

import logging

from wren.config import ServerConfig
from wren.errors import BadRequest, NotFound
from wren.files import resolve_asset, respond_with_file
from wren.http.request import Request
from wren.http.response import Response
from wren.users.store import RegistrationResult, UserStore, normalize_username

logger = logging.getLogger("wren.server")


async def home_page(request: Request, config: ServerConfig) -> Response:
    """Serve the site's entry document."""
    logger.debug("Handling homepage request.")
    return await respond_with_file(config.entry_path, request)


async def public_assets(
    request: Request,
    subpaths: tuple[str, ...],
    config: ServerConfig,
) -> Response:
    """Serve a file from beneath the assets root.

    The joined path must resolve inside the assets root; anything else is
    answered 404 without touching the file.
    """
    path = resolve_asset(config.assets_path, subpaths)
    if path is None:
        raise NotFound(f"{request.path!r} is outside the assets root")
    return await respond_with_file(path, request)


async def add_user(request: Request, config: ServerConfig, store: UserStore) -> Response:
    """Register the posted username.

    Accepts ``{"username": "..."}`` as JSON or ``username=...`` as a
    URL-encoded form. Registering an existing name is not an error.
    """
    username = await _read_username(request, config.max_body_size)
    result = await store.register_user(username)
    if result is RegistrationResult.CREATED:
        return Response(body="User created.", status=201)
    return Response(body="User already exists.")


async def _read_username(request: Request, max_size: int) -> str:
    """Pull the username out of a JSON or form body. Raises ``BadRequest``."""
    content_type = request.content_type or ""
    if "json" in content_type:
        try:
            payload = await request.json(max_size=max_size)
        except (ValueError, UnicodeDecodeError, RecursionError) as exc:
            raise BadRequest("Malformed JSON body") from exc
        raw = payload.get("username") if isinstance(payload, dict) else None
    else:
        try:
            form = await request.form(max_size=max_size)
        except UnicodeDecodeError as exc:
            raise BadRequest("Form body is not UTF-8") from exc
        raw = form.get("username")

    username = normalize_username(raw)
    if username is None:
        logger.debug("Rejected registration from %s: bad username", request.client)
        raise BadRequest("A non-blank username of at most 64 characters is required")
    return username
