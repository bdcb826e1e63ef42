"""Tests for wren.routing.router: registration and first-match dispatch."""

import logging

import pytest

from wren import schema
from wren.config import RouterConfig
from wren.context import Context
from wren.errors import CompileError, ConfigurationError, ParseError, UnknownTypeError, ValidationError
from wren.routing.router import Router
from wren.routing.types import TypeRegistry, default_registry


def _ctx(method: str, path: str, query: object = None, body: object = None) -> Context:
    return Context(method=method, path=path, query=query, body=body)  # type: ignore[arg-type]


def _next() -> None:
    return None


def _router(**kwargs: object) -> Router:
    return Router(registry=TypeRegistry(), **kwargs)  # type: ignore[arg-type]


class _CountingNext:
    def __init__(self, result: object = "next") -> None:
        self.calls = 0
        self.result = result

    async def __call__(self) -> object:
        self.calls += 1
        return self.result


class TestRegistration:
    def test_chainable(self) -> None:
        r = _router()
        assert r.get("/a", lambda ctx: 2).post("/b", lambda ctx: 4) is r
        assert [(route.method, route.pattern) for route in r.routes] == [("GET", "/a"), ("POST", "/b")]

    def test_decorator_returns_function(self) -> None:
        r = _router()

        @r.put("/items/:id(number)")
        def update(ctx: Context) -> str:
            return "ok"

        assert update(_ctx("PUT", "/")) == "ok"
        assert r.routes[0].method == "PUT"
        assert r.routes[0].name == "update"

    @pytest.mark.parametrize("method", ["get", "post", "put", "patch", "delete", "head", "options"])
    def test_method_shortcuts(self, method: str) -> None:
        r = _router()
        getattr(r, method)("/a", _next)
        assert r.routes[0].method == method.upper()

    def test_generic_route(self) -> None:
        r = _router().route("purge", "/cache", _next)
        assert r.routes[0].method == "PURGE"

    def test_parse_error_at_registration(self) -> None:
        r = _router()
        with pytest.raises(ParseError):
            r.get("/foo/:foo(number", _next)
        assert r.routes == []

    def test_unknown_type_at_registration(self) -> None:
        with pytest.raises(UnknownTypeError):
            _router().get("/foo/:id(uuid)", _next)

    def test_pattern_must_start_with_slash(self) -> None:
        with pytest.raises(ParseError):
            _router(prefix="/users").get("a", _next)

    def test_prefix_joined(self) -> None:
        r = _router(prefix="/users/")
        r.get("/a/:name(string)", _next)
        r.get("", _next)
        assert [route.pattern for route in r.routes] == ["/users/a/:name(string)", "/users"]

    def test_too_many_param_schemas(self) -> None:
        with pytest.raises(CompileError):
            _router().get("/a/:x", _next, params=[schema.string(), schema.string()])

    def test_default_registry(self) -> None:
        assert Router().registry is default_registry

    def test_config(self) -> None:
        r = Router(RouterConfig(prefix="/api", validate_responses=True), prefix="/v2")
        assert r.config.prefix == "/v2"
        assert r.config.validate_responses is True

    def test_registration_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="wren.routing"):
            _router().get("/a", _next, name="show_a")
        assert "Registered GET /a -> show_a" in caplog.text


class TestDispatch:
    @pytest.mark.anyio
    async def test_handler_result_returned(self) -> None:
        r = _router().get("/a", lambda ctx: 2)
        assert await r.middleware(_ctx("GET", "/a"), _next) == 2

    @pytest.mark.anyio
    async def test_async_handler(self) -> None:
        async def show(ctx: Context) -> str:
            return "async"

        r = _router().get("/a", show)
        assert await r(_ctx("GET", "/a"), _next) == "async"

    @pytest.mark.anyio
    async def test_no_match_calls_next_once(self) -> None:
        r = _router().get("/a", lambda ctx: 2)
        nxt = _CountingNext("none")
        assert await r.middleware(_ctx("GET", "/h"), nxt) == "none"
        assert nxt.calls == 1

    @pytest.mark.anyio
    async def test_sync_next(self) -> None:
        r = _router()
        assert await r.middleware(_ctx("GET", "/h"), lambda: "none") == "none"
        assert await r.middleware(_ctx("GET", "/h"), _next) is None

    @pytest.mark.anyio
    async def test_method_filter_case_insensitive(self) -> None:
        r = _router().get("/a", lambda ctx: "get").post("/a", lambda ctx: "post")
        assert await r.middleware(_ctx("get", "/a"), _next) == "get"
        assert await r.middleware(_ctx("Post", "/a"), _next) == "post"

    @pytest.mark.anyio
    async def test_other_method_falls_through(self) -> None:
        r = _router().get("/a", lambda ctx: 2)
        nxt = _CountingNext()
        assert await r.middleware(_ctx("DELETE", "/a"), nxt) == "next"
        assert nxt.calls == 1

    @pytest.mark.anyio
    async def test_first_registered_wins(self) -> None:
        r = _router().get("/a/:x", lambda ctx: "first").get("/a/:y", lambda ctx: "second")
        assert await r.middleware(_ctx("GET", "/a/1"), _next) == "first"

    @pytest.mark.anyio
    async def test_none_result_does_not_fall_through(self) -> None:
        r = _router().get("/a", lambda ctx: None).get("/a", lambda ctx: "second")
        nxt = _CountingNext()
        assert await r.middleware(_ctx("GET", "/a"), nxt) is None
        assert nxt.calls == 0

    @pytest.mark.anyio
    async def test_shape_mismatch_tries_next_route(self) -> None:
        r = _router().get("/foo/:foo(number)", lambda ctx: "number").get("/foo/:foo", lambda ctx: "string")
        assert await r.middleware(_ctx("GET", "/foo/123"), _next) == "number"
        assert await r.middleware(_ctx("GET", "/foo/abc"), _next) == "string"

    @pytest.mark.anyio
    async def test_typed_param_end_to_end(self) -> None:
        seen: list[object] = []
        r = _router().get("/foo/:foo(number)", lambda ctx: seen.append(ctx.params["foo"]))
        nxt = _CountingNext()

        await r.middleware(_ctx("GET", "/foo/123"), nxt)
        assert seen == [123]
        assert await r.middleware(_ctx("GET", "/foo/abc"), nxt) == "next"
        assert nxt.calls == 1

    @pytest.mark.anyio
    async def test_validation_error_does_not_fall_through(self) -> None:
        registry = TypeRegistry()
        registry.register("even", schema.union(["0", "2", "4"]), r"\d")
        r = Router(registry=registry)
        r.get("/n/:n(even)", lambda ctx: "even").get("/n/:n", lambda ctx: "fallback")
        nxt = _CountingNext()

        with pytest.raises(ValidationError) as exc_info:
            await r.middleware(_ctx("GET", "/n/3"), nxt)
        assert exc_info.value.name == "n"
        assert nxt.calls == 0

    @pytest.mark.anyio
    async def test_params_and_query_populated(self) -> None:
        r = _router().get("/users/:id(number)?verbose(boolean)&tag", lambda ctx: ctx)
        ctx = await r.middleware(_ctx("GET", "/users/7", "verbose=1&junk=x"), _next)
        assert ctx.params == {"id": 7}
        assert ctx.query == {"verbose": True}
        assert ctx.route is r.routes[0]

    @pytest.mark.anyio
    async def test_query_optional(self) -> None:
        r = _router().get("/foo/:foo(number)?bar(number)&baz", lambda ctx: dict(ctx.query))
        assert await r.middleware(_ctx("GET", "/foo/1", ""), _next) == {}
        assert await r.middleware(_ctx("GET", "/foo/1"), _next) == {}

    @pytest.mark.anyio
    async def test_required_query(self) -> None:
        r = _router().get("/search?q&page(number)", lambda ctx: ctx.query, required=["q"])
        assert await r.middleware(_ctx("GET", "/search", "q=wren"), _next) == {"q": "wren"}
        with pytest.raises(ValidationError) as exc_info:
            await r.middleware(_ctx("GET", "/search", "page=2"), _next)
        assert exc_info.value.location == "query"

    @pytest.mark.anyio
    async def test_invalid_query_value_propagates(self) -> None:
        r = _router().get("/a?n(number)", lambda ctx: "a")
        with pytest.raises(ValidationError, match="expected number but got 'x'"):
            await r.middleware(_ctx("GET", "/a", "n=x"), _next)

    @pytest.mark.anyio
    async def test_handler_error_propagates(self) -> None:
        def boom(ctx: Context) -> None:
            raise RuntimeError("boom")

        r = _router().get("/a", boom)
        with pytest.raises(RuntimeError, match="boom"):
            await r.middleware(_ctx("GET", "/a"), _next)

    @pytest.mark.anyio
    async def test_routes_added_after_dispatch(self) -> None:
        r = _router().get("/a/:x", lambda ctx: "first")
        assert await r.middleware(_ctx("GET", "/b"), lambda: "miss") == "miss"
        r.get("/b", lambda ctx: "b").get("/a/1", lambda ctx: "late")
        assert await r.middleware(_ctx("GET", "/b"), _next) == "b"
        assert await r.middleware(_ctx("GET", "/a/1"), _next) == "first"


class TestPrefix:
    @pytest.mark.anyio
    async def test_prefix_required(self) -> None:
        r = _router(prefix="/users").get("/a", lambda ctx: 2)
        assert await r.middleware(_ctx("GET", "/n"), _next) is None
        assert await r.middleware(_ctx("GET", "/a"), _next) is None
        assert await r.middleware(_ctx("GET", "/users/a"), _next) == 2

    @pytest.mark.anyio
    async def test_prefix_with_params(self) -> None:
        r = (
            _router(prefix="/users")
            .get("/a/:name(string)", lambda ctx: ctx.params["name"])
            .get("/b/:id(number)", lambda ctx: ctx.params["id"])
        )
        assert await r.middleware(_ctx("GET", "/a/ahh"), lambda: "next") == "next"
        assert await r.middleware(_ctx("GET", "/users/a/ahh"), _next) == "ahh"
        assert await r.middleware(_ctx("GET", "/users/b/100"), _next) == 100

    @pytest.mark.anyio
    async def test_root_prefix_empty_pattern(self) -> None:
        r = _router(prefix="/").get("", lambda ctx: "root").get("?q", lambda ctx: ctx.query, name="q")
        assert [route.pattern for route in r.routes] == ["/", "/?q"]
        assert await r.middleware(_ctx("GET", "/"), _next) == "root"

    def test_root_prefix_keeps_absolute_patterns(self) -> None:
        r = _router(prefix="/").get("/a", lambda ctx: 1)
        assert r.routes[0].pattern == "/a"


class TestSchemas:
    @pytest.mark.anyio
    async def test_response_schema_not_enforced_by_default(self) -> None:
        r = _router().get("/b", lambda ctx: 4, response=schema.string())
        assert await r.middleware(_ctx("GET", "/b"), _next) == 4
        assert r.routes[0].response is not None

    @pytest.mark.anyio
    async def test_response_schema_enforced_when_configured(self) -> None:
        r = Router(RouterConfig(validate_responses=True), registry=TypeRegistry())
        r.get("/a", lambda ctx: 2, response=schema.number()).get("/b", lambda ctx: 4, response=schema.string())

        assert await r.middleware(_ctx("GET", "/a"), _next) == 2
        with pytest.raises(ValidationError, match="expected string but got 4") as exc_info:
            await r.middleware(_ctx("GET", "/b"), _next)
        assert exc_info.value.location == "response"
        assert exc_info.value.status == 500

    @pytest.mark.anyio
    async def test_body_schema(self) -> None:
        r = _router().post("/c", lambda ctx: ctx.body, body=schema.number())
        assert await r.middleware(_ctx("POST", "/c", body=1), _next) == 1
        with pytest.raises(ValidationError, match="expected number but got '1'") as exc_info:
            await r.middleware(_ctx("POST", "/c", body="1"), _next)
        assert exc_info.value.location == "body"

    @pytest.mark.anyio
    async def test_param_schema_override(self) -> None:
        uid = schema.union([schema.number(), "@me"])
        r = _router().get("/users/:uid", lambda ctx: ctx.params["uid"], params=[uid])
        assert await r.middleware(_ctx("GET", "/users/@me"), _next) == "@me"
        assert await r.middleware(_ctx("GET", "/users/12"), _next) == 12
        with pytest.raises(ValidationError):
            await r.middleware(_ctx("GET", "/users/bob"), _next)


class TestTypeRegistryExtension:
    @pytest.mark.anyio
    async def test_extension_not_retroactive(self) -> None:
        registry = TypeRegistry()
        r = Router(registry=registry)
        r.get("/old/:id(number)", lambda ctx: ctx.params["id"])

        registry.register("number", schema.union([schema.number(), "@me"]), r"@me|[-+]?[0-9]+(?:\.[0-9]+)?")
        r.get("/new/:id(number)", lambda ctx: ctx.params["id"])

        assert await r.middleware(_ctx("GET", "/old/@me"), lambda: "miss") == "miss"
        assert await r.middleware(_ctx("GET", "/new/@me"), _next) == "@me"
        assert await r.middleware(_ctx("GET", "/old/5"), _next) == 5

    def test_unknown_until_registered(self) -> None:
        registry = TypeRegistry()
        r = Router(registry=registry)
        with pytest.raises(UnknownTypeError):
            r.get("/u/:uid(uid)", _next)
        registry.register("uid", schema.union([schema.number(), "@me"]), r"@me|\d+")
        r.get("/u/:uid(uid)", _next)
        assert len(r.routes) == 1


class TestInclude:
    @pytest.mark.anyio
    async def test_flattened_with_parent_prefix(self) -> None:
        users = _router(prefix="/users").get("/:id(number)", lambda ctx: ctx.params["id"])
        api = _router(prefix="/api").include(users)

        assert [route.pattern for route in api.routes] == ["/api/users/:id(number)"]
        assert await api.middleware(_ctx("GET", "/api/users/3"), _next) == 3
        assert await api.middleware(_ctx("GET", "/users/3"), lambda: "miss") == "miss"

    @pytest.mark.anyio
    async def test_keeps_options(self) -> None:
        child = _router().post("/c?q", lambda ctx: ctx.body, body=schema.number(), required=["q"], name="create")
        parent = _router(prefix="/p").include(child)
        route = parent.routes[0]

        assert route.name == "create"
        assert route.required_query == frozenset({"q"})
        with pytest.raises(ValidationError):
            await parent.middleware(_ctx("POST", "/p/c", "q=1", body="x"), _next)

    def test_snapshot_at_include_time(self) -> None:
        child = _router().get("/a", _next)
        parent = _router().include(child)
        child.get("/b", _next)
        assert [route.pattern for route in parent.routes] == ["/a"]

    def test_priority_after_existing_routes(self) -> None:
        parent = _router().get("/x", _next)
        parent.include(_router().get("/y", _next))
        assert [route.pattern for route in parent.routes] == ["/x", "/y"]

    def test_cannot_include_self(self) -> None:
        r = _router()
        with pytest.raises(ConfigurationError):
            r.include(r)


class TestMatch:
    def test_match_returns_route_and_values(self) -> None:
        r = _router().get("/a/:n(number)?q", _next)
        found = r.match("GET", "/a/5", "q=x")
        assert found is not None
        route, result = found
        assert route.pattern == "/a/:n(number)?q"
        assert result.params == {"n": 5}
        assert result.query == {"q": "x"}

    def test_match_none(self) -> None:
        assert _router().get("/a", _next).match("GET", "/b") is None

    def test_repr(self) -> None:
        assert repr(_router(prefix="/u").get("/a", _next)) == "Router(prefix='/u', routes=1)"
