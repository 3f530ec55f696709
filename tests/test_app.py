"""End-to-end tests for the default site, through the ASGI interface."""

import asyncio
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from wren import files
from wren.app import App, create_app
from wren.config import ServerConfig
from wren.errors import UserStoreError
from wren.server import run as server_run
from wren.testing import TestClient
from wren.users import MemoryUserStore, RegistrationResult, SQLiteUserStore


class _BrokenStore:
    """A store whose every registration fails."""

    async def open(self) -> None:
        pass

    async def register_user(self, username: str) -> RegistrationResult:
        raise UserStoreError("disk full")

    async def close(self) -> None:
        pass


class _UnopenableStore(_BrokenStore):
    async def open(self) -> None:
        raise UserStoreError("cannot open")


class TestHomePage:
    async def test_entry_document(self, app: App, site_dir: Path) -> None:
        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 200
        assert response.content_type == "text/html"
        assert response.body_bytes == (site_dir / "public" / "index.html").read_bytes()

    async def test_content_length_matches_body(self, app: App) -> None:
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return {"type": "http.request", "body": b"", "more_body": False}

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        scope = {"type": "http", "method": "GET", "path": "/", "headers": []}
        await app(scope, receive, send)

        start, body = sent
        headers = dict(start["headers"])
        assert int(headers[b"content-length"]) == len(body["body"])
        assert "more_body" not in body

    async def test_missing_entry_document(self, site_dir: Path) -> None:
        (site_dir / "public" / "index.html").unlink()
        async with TestClient(create_app(ServerConfig(site_root=site_dir))) as client:
            response = await client.get("/")
        assert response.status == 404
        assert response.text == "Resource not found."

    async def test_custom_entry_document(self, site_dir: Path) -> None:
        config = ServerConfig(site_root=site_dir, entry_document="src/app.js")
        async with TestClient(create_app(config)) as client:
            response = await client.get("/")
        assert response.status == 200
        assert response.content_type == "text/javascript"


class TestPublicAssets:
    @pytest.mark.parametrize(
        ("path", "content_type"),
        [
            ("/public/style.css", "text/css"),
            ("/public/app.js", "text/javascript"),
            ("/public/css/main.css", "text/css"),
            ("/public/data.bin", "text/plain"),
            ("/public/README", "text/plain"),
        ],
    )
    async def test_served_with_content_type(
        self, app: App, config: ServerConfig, path: str, content_type: str
    ) -> None:
        async with TestClient(app) as client:
            response = await client.get(path)
        assert response.status == 200
        assert response.content_type == content_type
        relative = path.removeprefix("/public/")
        assert response.body_bytes == (config.assets_path / relative).read_bytes()

    @pytest.mark.parametrize(
        "path",
        [
            "/public/nope.css",
            "/public/css",
            "/public",
            "/public/",
            "/public/../secret.txt",
            "/public/../../secret.txt",
            "/public/css/../../public/index.html",
        ],
    )
    async def test_not_found(self, app: App, path: str) -> None:
        async with TestClient(app) as client:
            response = await client.get(path)
        assert response.status == 404
        assert response.text == "Resource not found."
        assert response.content_type == "text/html"

    async def test_traversal_never_reads(
        self, app: App, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        reads: list[Path] = []

        async def spy(path: Path) -> bytes:
            reads.append(path)
            return b""

        monkeypatch.setattr(files, "read_file", spy)
        async with TestClient(app) as client:
            response = await client.get("/public/../secret.txt")
        assert response.status == 404
        assert reads == []

    async def test_read_failure_is_500(
        self,
        app: App,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        async def denied(path: Path) -> bytes:
            raise PermissionError(13, "Permission denied", str(path))

        monkeypatch.setattr(files, "read_file", denied)
        with caplog.at_level(logging.ERROR, logger="wren.server"):
            async with TestClient(app) as client:
                response = await client.get("/public/style.css")
        assert response.status == 500
        assert response.text == "Internal Server Error"
        assert "500 GET /public/style.css" in caplog.text

    async def test_concurrent_requests(self, app: App, config: ServerConfig) -> None:
        paths = ["/public/style.css", "/public/app.js", "/", "/public/missing"] * 5
        async with TestClient(app) as client:
            responses = await asyncio.gather(*(client.get(p) for p in paths))
        statuses = [r.status for r in responses]
        assert statuses == [200, 200, 200, 404] * 5
        assert responses[0].body_bytes == (config.assets_path / "style.css").read_bytes()

    async def test_repeated_requests_are_identical(self, app: App) -> None:
        async with TestClient(app) as client:
            first = await client.get("/public/style.css")
            second = await client.get("/public/style.css")
        assert first == second


class TestRouting:
    async def test_unknown_route(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/elsewhere/style.css")
        assert response.status == 404
        assert response.text == "Resource not found."

    @pytest.mark.parametrize(
        ("method", "path", "allow"),
        [
            ("POST", "/", "GET"),
            ("PUT", "/public/style.css", "GET"),
            ("DELETE", "/public/style.css", "GET"),
            ("GET", "/adduser", "POST"),
            ("HEAD", "/", "GET"),
        ],
    )
    async def test_method_not_allowed(
        self,
        app: App,
        monkeypatch: pytest.MonkeyPatch,
        method: str,
        path: str,
        allow: str,
    ) -> None:
        async def never(path: Path) -> bytes:
            raise AssertionError("file read for a rejected method")

        monkeypatch.setattr(files, "read_file", never)
        async with TestClient(app) as client:
            response = await client.request(method, path)
        assert response.status == 405
        assert response.text == "Method not allowed."
        assert response.header("allow") == allow

    async def test_custom_routes(self) -> None:
        app = App()

        @app.route("health")
        def health() -> str:
            return "ok"

        @app.route("teapot", methods=["GET", "POST"])
        async def teapot(subpaths: tuple[str, ...]) -> tuple[str, int]:
            return "/".join(subpaths), 418

        async with TestClient(app) as client:
            ok = await client.get("/health")
            tea = await client.post("/teapot/earl/grey")

        assert (ok.status, ok.text) == (200, "ok")
        assert (tea.status, tea.text) == (418, "earl/grey")

    async def test_unsupported_return_type_is_500(self) -> None:
        app = App()

        @app.route("odd")
        def odd() -> dict[str, str]:
            return {"not": "a response"}

        async with TestClient(app) as client:
            response = await client.get("/odd")
        assert response.status == 500
        assert response.text == "Internal Server Error"

    def test_register_after_freeze(self, app: App) -> None:
        assert app.router.compiled
        with pytest.raises(RuntimeError):
            app.route("late")(lambda: "too late")

    def test_default_route_table(self, app: App) -> None:
        table = {r.key: r.methods for r in app.router.routes}
        assert table == {
            "": frozenset({"GET"}),
            "adduser": frozenset({"POST"}),
            "public": frozenset({"GET"}),
        }


class TestAddUser:
    async def test_json(self, app: App) -> None:
        async with TestClient(app) as client:
            created = await client.post("/adduser", json={"username": "ada"})
            again = await client.post("/adduser", json={"username": " ada "})
        assert (created.status, created.text) == (201, "User created.")
        assert (again.status, again.text) == (200, "User already exists.")
        assert isinstance(app.store, MemoryUserStore)
        assert len(app.store) == 1

    async def test_form(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.post("/adduser", form={"username": "bob"})
        assert response.status == 201
        assert "bob" in app.store

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"json": {"username": "   "}},
            {"json": {"username": 7}},
            {"json": {"name": "ada"}},
            {"json": ["ada"]},
            {"json": {"username": "x" * 65}},
            {"form": {}},
            {"body": b"{not json", "headers": {"content-type": "application/json"}},
            {"body": b"username=\xff", "headers": {"content-type": "text/plain"}},
        ],
    )
    async def test_bad_request(self, app: App, kwargs: dict[str, Any]) -> None:
        async with TestClient(app) as client:
            response = await client.post("/adduser", **kwargs)
        assert response.status == 400
        assert response.text == "Bad Request."
        assert len(app.store) == 0

    async def test_deeply_nested_json(self, app: App) -> None:
        body = b"[" * 100_000 + b"]" * 100_000
        async with TestClient(app) as client:
            response = await client.post(
                "/adduser", body=body, headers={"content-type": "application/json"}
            )
        assert response.status == 400
        assert response.text == "Bad Request."

    async def test_body_too_large(self, site_dir: Path) -> None:
        app = create_app(ServerConfig(site_root=site_dir, max_body_size=16))
        async with TestClient(app) as client:
            response = await client.post("/adduser", json={"username": "a" * 40})
        assert response.status == 400

    async def test_store_failure_is_500(
        self, config: ServerConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        app = create_app(config, store=_BrokenStore())
        with caplog.at_level(logging.ERROR, logger="wren.server"):
            async with TestClient(app) as client:
                response = await client.post("/adduser", json={"username": "ada"})
        assert response.status == 500
        assert response.text == "Internal Server Error"
        assert "UserStoreError" in caplog.text

    async def test_sqlite_store(self, site_dir: Path, tmp_path: Path) -> None:
        config = ServerConfig(site_root=site_dir, database=tmp_path / "users.db")
        app = create_app(config)
        assert isinstance(app.store, SQLiteUserStore)

        async with TestClient(app) as client:
            created = await client.post("/adduser", json={"username": "ada"})
            again = await client.post("/adduser", form={"username": "ada"})
        assert created.status == 201
        assert again.status == 200


class TestLifespan:
    async def _run_lifespan(self, app: App) -> list[dict[str, Any]]:
        incoming = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return incoming.pop(0)

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)
        return sent

    async def test_startup_and_shutdown(self, app: App) -> None:
        calls: list[str] = []
        app.on_startup(lambda: calls.append("start"))

        @app.on_shutdown
        async def stop() -> None:
            calls.append("stop")

        sent = await self._run_lifespan(app)
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
        assert calls == ["start", "stop"]

    async def test_startup_failure(self, config: ServerConfig) -> None:
        app = create_app(config, store=_UnopenableStore())
        sent = await self._run_lifespan(app)
        assert sent == [{"type": "lifespan.startup.failed", "message": "cannot open"}]


class TestTrace:
    async def test_trace_lines(self, site_dir: Path, caplog: pytest.LogCaptureFixture) -> None:
        app = create_app(ServerConfig(site_root=site_dir, trace=True))
        with caplog.at_level(logging.INFO, logger="wren.trace"):
            async with TestClient(app) as client:
                await client.get("/public/style.css")

        messages = [r.getMessage() for r in caplog.records if r.name == "wren.trace"]
        assert messages == [
            "Handling request from client for /public/style.css",
            "Completed request for /public/style.css (200)",
        ]

    async def test_debug_lines_for_each_file_write(
        self, app: App, config: ServerConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="wren.server"):
            async with TestClient(app) as client:
                await client.get("/")
                await client.get("/public/style.css")

        messages = [r.getMessage() for r in caplog.records if r.name == "wren.server"]
        assert "Handling homepage request." in messages
        assert f"Writing {config.entry_path} as response." in messages
        assert f"Writing {config.assets_path / 'style.css'} as response." in messages

    async def test_no_trace_by_default(
        self, app: App, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="wren.trace"):
            async with TestClient(app) as client:
                await client.get("/")
        assert not [r for r in caplog.records if r.name == "wren.trace"]


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Undo the handler and levels ``App.run`` sets on the wren loggers."""
    root = logging.getLogger("wren")
    trace = logging.getLogger("wren.trace")
    saved = (root.level, trace.level, list(root.handlers))
    yield
    root.setLevel(saved[0])
    trace.setLevel(saved[1])
    root.handlers[:] = saved[2]


class TestRun:
    async def test_trace_lines_reach_stdout(
        self,
        site_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        restore_logging: None,
    ) -> None:
        calls: list[dict[str, Any]] = []

        def fake_run_server(app: App, **kwargs: Any) -> None:
            calls.append(kwargs)

        monkeypatch.setattr(server_run, "run_server", fake_run_server)
        app = create_app(ServerConfig(site_root=site_dir, trace=True))
        app.run()

        async with TestClient(app) as client:
            await client.get("/")

        out = capsys.readouterr().out
        assert "Server is running on port 5008" in out
        assert "Handling request from client for /" in out
        assert "Completed request for / (200)" in out
        assert calls == [{"host": "127.0.0.1", "port": 5008, "log_level": "info"}]

    def test_port_override_in_startup_line(
        self,
        site_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        restore_logging: None,
    ) -> None:
        monkeypatch.setattr(server_run, "run_server", lambda app, **kwargs: None)
        create_app(ServerConfig(site_root=site_dir)).run(port=3000)
        assert "Server is running on port 3000" in capsys.readouterr().out
