"""Tests for roost.pages.discovery — routes/ directories to route entries."""

from pathlib import Path

import pytest

from roost.app import App
from roost.config import AppConfig
from roost.errors import RouteModuleError
from roost.pages.discovery import discover_routes, normalize_route_path
from roost.pages.types import RouteKind
from roost.testing import TestClient


def _write(root: Path, relative: str, content: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


@pytest.fixture
def routes_dir(tmp_path: Path) -> Path:
    root = tmp_path / "routes"
    _write(root, "_app.html", "<html>{{ component }}</html>")
    _write(
        root,
        "index.py",
        "def component(ctx):\n    return '<p>home</p>'\n",
    )
    _write(root, "blog/_layout.html", "<main>{{ component }}</main>")
    _write(
        root,
        "blog/[slug].py",
        "def get(ctx):\n    return {'title': ctx.params['slug']}\n",
    )
    _write(root, "blog/[slug].html", "<h1>{{ data.title }}</h1>")
    _write(
        root,
        "_middleware.py",
        "async def handler(ctx):\n"
        "    response = await ctx.next()\n"
        "    return response.with_header('X-Root', 'yes')\n",
    )
    _write(root, "blog/index_test.py", "raise RuntimeError('test modules are not routes')\n")
    _write(root, "blog/notes.txt", "not a route")
    _write(root, "__init__.py", "")
    _write(root, ".hidden/secret.py", "raise RuntimeError('hidden directories are skipped')\n")
    return root


class TestNormalizeRoutePath:
    def test_strips_extension(self) -> None:
        assert normalize_route_path("blog/[slug].py") == "/blog/[slug]"

    def test_root_file(self) -> None:
        assert normalize_route_path("_app.html") == "/_app"


class TestDiscoverRoutes:
    def test_entries_in_specificity_order(self, routes_dir: Path) -> None:
        entries = discover_routes(routes_dir)
        assert [e.path for e in entries] == [
            "/_middleware",
            "/_app",
            "/index",
            "/blog/_layout",
            "/blog/[slug]",
        ]

    def test_kinds(self, routes_dir: Path) -> None:
        kinds = {e.path: e.kind for e in discover_routes(routes_dir)}
        assert kinds["/_app"] is RouteKind.APP
        assert kinds["/_middleware"] is RouteKind.MIDDLEWARE
        assert kinds["/blog/_layout"] is RouteKind.LAYOUT
        assert kinds["/blog/[slug]"] is RouteKind.PAGE

    def test_template_pairs_with_module(self, routes_dir: Path) -> None:
        entry = {e.path: e for e in discover_routes(routes_dir)}["/blog/[slug]"]
        assert entry.file_path.endswith("[slug].py")
        assert entry.component is not None
        assert list(entry.handlers) == ["GET"]  # type: ignore[arg-type]

    def test_template_only_entry(self, routes_dir: Path) -> None:
        entry = {e.path: e for e in discover_routes(routes_dir)}["/_app"]
        assert entry.file_path.endswith("_app.html")
        assert entry.handlers is None
        assert entry.component is not None

    def test_custom_ignore(self, routes_dir: Path) -> None:
        paths = [e.path for e in discover_routes(routes_dir, ignore=[r"^blog/", r"_test\.py$"])]
        assert paths == ["/_middleware", "/_app", "/index"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            discover_routes(tmp_path / "nope")

    def test_module_without_exports(self, tmp_path: Path) -> None:
        _write(tmp_path, "empty.py", "VALUE = 1\n")
        with pytest.raises(RouteModuleError) as exc_info:
            discover_routes(tmp_path)
        assert exc_info.value.path == "/empty"

    def test_bad_arity(self, tmp_path: Path) -> None:
        _write(tmp_path, "bad.py", "def handler(ctx, other):\n    return None\n")
        with pytest.raises(RouteModuleError, match="exactly one argument"):
            discover_routes(tmp_path)


class TestMountRoutes:
    async def test_full_page(self, routes_dir: Path) -> None:
        app = App()
        result = app.mount_routes(routes_dir)
        assert [(r.method, r.pattern) for r in result.routes] == [
            ("GET", "/"),
            ("GET", "/blog/:slug"),
        ]

        async with TestClient(app) as client:
            response = await client.get("/blog/hello")
        assert response.status == 200
        assert response.text == "<html><main><h1>hello</h1></main></html>"
        assert response.header("x-root") == "yes"

    async def test_home(self, routes_dir: Path) -> None:
        app = App()
        app.mount_routes(routes_dir)
        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.text == "<html><p>home</p></html>"

    async def test_template_data_is_escaped(self, routes_dir: Path) -> None:
        app = App()
        app.mount_routes(routes_dir)
        async with TestClient(app) as client:
            response = await client.get("/blog/<b>")
        assert "<h1>&lt;b&gt;</h1>" in response.text

    async def test_autoescape_disabled(self, routes_dir: Path) -> None:
        app = App(AppConfig(autoescape=False))
        app.mount_routes(routes_dir)
        async with TestClient(app) as client:
            response = await client.get("/blog/<b>")
        assert "<h1><b></h1>" in response.text

    async def test_base_path(self, routes_dir: Path) -> None:
        app = App(AppConfig(base_path="/site"))
        app.mount_routes(routes_dir)
        async with TestClient(app) as client:
            response = await client.get("/site/blog/hi")
            missing = await client.get("/blog/hi")
        assert response.status == 200
        assert missing.status == 404
