"""Tests for roost.pages.builder — route tree assembly and leaf compilation."""

import logging

import pytest

from roost.app import App
from roost.config import AppConfig
from roost.errors import ConfigurationError
from roost.http.request import Request
from roost.http.response import Response
from roost.pages.builder import build_routes, in_scope, resolve_chain
from roost.pages.types import RouteEntry


def app_component(ctx):
    return f"<app>{ctx.component}</app>"


def layout_a(ctx):
    return f"<a>{ctx.component}</a>"


def layout_b(ctx):
    return f"<b>{ctx.component}</b>"


def page(ctx):
    return "<page/>"


async def mw(ctx):
    response = await ctx.next()
    return response.with_header("X-Mw", "1")


def entry(path: str, **parts) -> RouteEntry:
    return RouteEntry.from_parts(path, **parts)


async def fetch(app: App, method: str, target: str) -> Response:
    return await app.handler()(Request.create(method, target))


class TestInScope:
    def test_root_ancestor_wraps_everything(self) -> None:
        assert in_scope(entry("/_app", component=app_component), "/deep/page")

    def test_segment_boundary(self) -> None:
        layout = entry("/blog/_layout", component=layout_a)
        assert in_scope(layout, "/blog/post")
        assert in_scope(layout, "/blog/2024/post")
        assert not in_scope(layout, "/blogroll")
        assert not in_scope(layout, "/about")


class TestResolveChain:
    def test_skip_app_wrapper_keeps_layouts_and_middleware(self) -> None:
        stack = [
            entry("/_app", component=app_component),
            entry("/_layout", component=layout_a),
            entry("/_middleware", handlers=mw),
        ]
        leaf = entry("/page", component=page, config={"skip_app_wrapper": True})
        chain = resolve_chain(stack, leaf)
        assert chain.layouts == (layout_a, page)
        assert chain.middleware == (mw,)

    def test_skip_inherited_layouts_keeps_app(self) -> None:
        stack = [
            entry("/_app", component=app_component),
            entry("/_layout", component=layout_a),
            entry("/a/_layout", component=layout_b),
        ]
        leaf = entry("/a/page", component=page, config={"skip_inherited_layouts": True})
        chain = resolve_chain(stack, leaf)
        assert chain.layouts == (app_component, page)

    def test_skip_both(self) -> None:
        stack = [entry("/_app", component=app_component), entry("/_layout", component=layout_a)]
        leaf = entry(
            "/page",
            component=page,
            config={"skip_app_wrapper": True, "skip_inherited_layouts": True},
        )
        assert resolve_chain(stack, leaf).layouts == (page,)

    def test_layouts_root_to_leaf(self) -> None:
        stack = [
            entry("/_layout", component=layout_a),
            entry("/_app", component=app_component),
            entry("/a/_layout", component=layout_b),
        ]
        chain = resolve_chain(stack, entry("/a/page", component=page))
        assert chain.layouts == (app_component, layout_a, layout_b, page)

    def test_deeper_app_replaces_outer(self) -> None:
        def inner_app(ctx):
            return ""

        stack = [entry("/_app", component=app_component), entry("/admin/_app", component=inner_app)]
        chain = resolve_chain(stack, entry("/admin/page", component=page))
        assert chain.layouts == (inner_app, page)

    def test_leaf_without_component(self) -> None:
        stack = [entry("/_app", component=app_component)]
        chain = resolve_chain(stack, entry("/api", handlers=mw))
        assert chain.layouts == (app_component,)

    def test_middleware_method_map_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        stack = [entry("/_middleware", handlers={"GET": mw})]
        with caplog.at_level(logging.WARNING, logger="roost.routing"):
            chain = resolve_chain(stack, entry("/page", component=page))
        assert chain.middleware == ()
        assert "Ignoring per-method handlers" in caplog.text

    def test_stack_is_not_mutated(self) -> None:
        stack = [entry("/_app", component=app_component), entry("/_layout", component=layout_a)]
        before = list(stack)
        resolve_chain(stack, entry("/page", component=page, config={"skip_app_wrapper": True}))
        assert stack == before


class TestBuildRoutes:
    async def test_blog_end_to_end(self) -> None:
        seen: dict[str, object] = {}

        def blog_layout(ctx):
            return f"<main>{ctx.component}</main>"

        def post_component(ctx):
            return f"<h1>{ctx.data['title']}</h1>"

        def get_post(ctx):
            seen["params"] = dict(ctx.params)
            seen["layouts"] = ctx.layouts
            return {"title": ctx.params["slug"].title()}

        app = App()
        result = app.build_routes(
            [
                entry("/blog/[slug]", component=post_component, handlers={"GET": get_post}),
                entry("/blog/_layout", component=blog_layout),
                entry("/_app", component=app_component),
            ]
        )
        assert [(r.method, r.pattern) for r in result.routes] == [("GET", "/blog/:slug")]

        response = await fetch(app, "GET", "/blog/hello")
        assert response.status == 200
        assert response.text == "<app><main><h1>Hello</h1></main></app>"
        assert seen["params"] == {"slug": "hello"}
        assert seen["layouts"] == (app_component, blog_layout, post_component)

    async def test_component_only_registers_get(self) -> None:
        app = App()
        result = app.build_routes([entry("/about", component=page)])
        assert [(r.method, r.pattern) for r in result.routes] == [("GET", "/about")]
        assert (await fetch(app, "GET", "/about")).text == "<page/>"
        assert (await fetch(app, "POST", "/about")).status == 404

    async def test_empty_method_map_registers_get(self) -> None:
        app = App()
        result = app.build_routes([entry("/about", component=page, handlers={})])
        assert [r.method for r in result.routes] == ["GET"]

    async def test_method_map_registers_each_method(self) -> None:
        def get(ctx):
            return Response("read")

        def post(ctx):
            return Response("created", status=201)

        app = App()
        result = app.build_routes([entry("/items", handlers={"GET": get, "POST": post})])
        assert [r.method for r in result.routes] == ["GET", "POST"]
        assert (await fetch(app, "POST", "/items")).status == 201
        assert (await fetch(app, "GET", "/items")).text == "read"
        assert (await fetch(app, "DELETE", "/items")).status == 404

    async def test_single_handler_registers_all_methods(self) -> None:
        def any_method(ctx):
            return Response(ctx.request.method)

        app = App()
        result = app.build_routes([entry("/echo", handlers=any_method)])
        assert [r.method for r in result.routes] == ["ALL"]
        assert (await fetch(app, "PATCH", "/echo")).text == "PATCH"

    async def test_index_and_capture_patterns(self) -> None:
        app = App()
        result = app.build_routes(
            [
                entry("/index", component=page),
                entry("/docs/[...path]", component=page),
                entry("/(marketing)/pricing", component=page),
            ]
        )
        assert sorted(r.pattern for r in result.routes) == ["/", "/docs/:path*", "/pricing"]

    async def test_route_override(self) -> None:
        def show(ctx):
            return Response(ctx.params["id"])

        app = App()
        app.build_routes(
            [entry("/legacy", handlers={"GET": show}, config={"route_override": "/old/:id"})]
        )
        assert (await fetch(app, "GET", "/old/5")).text == "5"
        assert (await fetch(app, "GET", "/legacy")).status == 404

    async def test_group_capture_registered_after_static(self) -> None:
        def slug(ctx):
            return Response(f"slug {ctx.params['slug']}")

        def zeta(ctx):
            return Response("zeta page")

        app = App()
        result = app.build_routes(
            [entry("/(site)/[slug]", handlers=slug), entry("/zeta", handlers=zeta)]
        )
        assert [r.pattern for r in result.routes] == ["/zeta", "/:slug"]
        assert (await fetch(app, "GET", "/zeta")).text == "zeta page"
        assert (await fetch(app, "GET", "/other")).text == "slug other"

    async def test_override_capture_registered_after_static(self) -> None:
        def catch(ctx):
            return Response(f"catch {ctx.params['id']}")

        def b(ctx):
            return Response("b page")

        app = App()
        result = app.build_routes(
            [
                entry("/a", handlers=catch, config={"route_override": "/:id"}),
                entry("/b", handlers=b),
            ]
        )
        assert [r.pattern for r in result.routes] == ["/b", "/:id"]
        assert (await fetch(app, "GET", "/b")).text == "b page"
        assert (await fetch(app, "GET", "/a")).text == "catch a"

    async def test_middleware_wraps_subtree(self) -> None:
        app = App()
        app.build_routes(
            [
                entry("/admin/_middleware", handlers=mw),
                entry("/admin/index", component=page),
                entry("/public", component=page),
            ]
        )
        assert (await fetch(app, "GET", "/admin")).header("X-Mw") == "1"
        assert (await fetch(app, "GET", "/public")).header("X-Mw") is None

    async def test_middleware_short_circuit(self) -> None:
        calls = 0

        def guard(ctx):
            return Response("denied", status=403)

        def protected(ctx):
            nonlocal calls
            calls += 1
            return Response("secret")

        app = App()
        app.build_routes([entry("/_middleware", handlers=guard), entry("/secret", handlers=protected)])
        response = await fetch(app, "GET", "/secret")
        assert response.status == 403
        assert calls == 0

    async def test_middleware_order_outermost_first(self) -> None:
        events: list[str] = []

        def make(name: str):
            async def handler(ctx):
                events.append(name)
                return await ctx.next()

            return handler

        app = App()
        app.build_routes(
            [
                entry("/a/_middleware", handlers=make("inner")),
                entry("/_middleware", handlers=make("outer")),
                entry("/a/page", component=page),
            ]
        )
        await fetch(app, "GET", "/a/page")
        assert events == ["outer", "inner"]

    async def test_sibling_ancestors_do_not_leak(self) -> None:
        app = App()
        app.build_routes(
            [
                entry("/a/_layout", component=layout_a),
                entry("/a/page", component=page),
                entry("/b/_layout", component=layout_b),
                entry("/b/page", component=page),
                entry("/c", component=page),
            ]
        )
        assert (await fetch(app, "GET", "/a/page")).text == "<a><page/></a>"
        assert (await fetch(app, "GET", "/b/page")).text == "<b><page/></b>"
        assert (await fetch(app, "GET", "/c")).text == "<page/>"

    async def test_group_layout_scoped_to_group(self) -> None:
        app = App()
        app.build_routes(
            [
                entry("/(shop)/_layout", component=layout_a),
                entry("/(shop)/cart", component=page),
                entry("/about", component=page),
            ]
        )
        assert (await fetch(app, "GET", "/cart")).text == "<a><page/></a>"
        assert (await fetch(app, "GET", "/about")).text == "<page/>"

    async def test_handler_response_bypasses_render(self) -> None:
        def redirect(ctx):
            return ctx.redirect("/login")

        app = App()
        app.build_routes([entry("/_app", component=app_component), entry("/go", handlers=redirect)])
        response = await fetch(app, "GET", "/go")
        assert response.status == 302
        assert response.header("Location") == "/login"

    async def test_base_path_applies(self) -> None:
        app = App(AppConfig(base_path="/docs"))
        result = app.build_routes([entry("/guide/[slug]", component=page)])
        assert result.routes[0].pattern == "/docs/guide/:slug"
        assert (await fetch(app, "GET", "/docs/guide/intro")).status == 200

    def test_error_entries_collected_not_registered(self, caplog: pytest.LogCaptureFixture) -> None:
        app = App()
        with caplog.at_level(logging.DEBUG, logger="roost.routing"):
            result = build_routes(app, [entry("/_error", component=page), entry("/a", component=page)])
        assert [e.path for e in result.error_entries] == ["/_error"]
        assert [r.pattern for r in result.routes] == ["/a"]
        assert "Skipping error route" in caplog.text

    async def test_duplicate_first_registration_wins(self, caplog: pytest.LogCaptureFixture) -> None:
        def other(ctx):
            return "<other/>"

        app = App()
        with caplog.at_level(logging.WARNING, logger="roost.routing"):
            app.build_routes([entry("/a/index", component=other), entry("/a", component=page)])
        assert "Duplicate route GET /a" in caplog.text
        assert (await fetch(app, "GET", "/a")).text == "<page/>"

    def test_duplicate_rejected_when_strict(self) -> None:
        app = App(AppConfig(strict_routes=True))
        with pytest.raises(ConfigurationError, match="Duplicate route GET /a"):
            app.build_routes([entry("/a/index", component=page), entry("/a", component=page)])

    def test_registration_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        app = App()
        with caplog.at_level(logging.DEBUG, logger="roost.routing"):
            app.build_routes([entry("/a", component=page)])
        assert "Registered GET /a" in caplog.text
