"""Users API: profiles and friend lists for a chat backend.

Shows the ``uid`` parameter type: a numeric user id, or ``@me`` for the
signed-in user. A stand-in session middleware puts the current user id
into ``ctx.state``; a real host would read it from its session store.

Plug ``app`` into any host that provides ``(ctx, next)``::

    result = await app(Context.from_asgi(scope, body=payload), not_found)
"""

from typing import Any

from wren import Context, Router, compose, register_type, schema

register_type("uid", schema.union([schema.number(), "@me"]), r"@me|[0-9]+")

USERS: dict[int, dict[str, Any]] = {
    1: {"id": 1, "username": "ahh", "password_hash": "x", "avatar": "", "tags": ["admin"], "friends": [2]},
    2: {"id": 2, "username": "bee", "password_hash": "y", "avatar": "", "tags": [], "friends": [1, 3]},
    3: {"id": 3, "username": "cee", "password_hash": "z", "avatar": "", "tags": ["bot"], "friends": [2]},
}

PAGE_SIZE = 2


def _public(user: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in user.items() if k != "password_hash"}


def _user(ctx: Context) -> dict[str, Any] | None:
    uid = ctx.params["uid"]
    if uid == "@me":
        uid = ctx.state.get("user_id")
    return USERS.get(int(uid)) if uid is not None else None


async def session(ctx: Context, next) -> Any:
    ctx.state.setdefault("user_id", 1)
    return await next()


users = Router(prefix="/users")


@users.get("/:uid(uid)", response=schema.any_())
def show_user(ctx: Context) -> dict[str, Any] | None:
    user = _user(ctx)
    return _public(user) if user else None


@users.get("/:uid(uid)/friends?tag&page(number)")
def list_friends(ctx: Context) -> dict[str, Any]:
    user = _user(ctx)
    friends = [USERS[f] for f in user["friends"]] if user else []
    if "tag" in ctx.query:
        friends = [f for f in friends if ctx.query["tag"] in f["tags"]]

    page = max(int(ctx.query.get("page", 1)), 1)
    start = (page - 1) * PAGE_SIZE
    return {"count": len(friends), "items": [_public(f) for f in friends[start : start + PAGE_SIZE]]}


@users.put("/:uid(uid)/friends/:fid(number)")
def add_friend(ctx: Context) -> list[int]:
    user = _user(ctx)
    fid = int(ctx.params["fid"])
    if user is None or fid not in USERS:
        return []
    if fid not in user["friends"]:
        user["friends"].append(fid)
    return user["friends"]


@users.post("/search?key", body=schema.string(), required=["key"])
def search(ctx: Context) -> list[str]:
    key = ctx.query["key"].lower()
    tag = ctx.body
    return [u["username"] for u in USERS.values() if key in u["username"] and (not tag or tag in u["tags"])]


app = compose([session, users])
