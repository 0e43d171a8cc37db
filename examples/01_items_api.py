"""
Items API example

Typed handlers are mounted into a plain dict (standing in for a host
server's route table) and served in-process through an httpx transport.

Run:
  uv run python examples/01_items_api.py
"""

from __future__ import annotations

import anyio
import httpx

from jsonreply import (
    HttpRequest,
    RemoteError,
    add_handler,
    aextract_payload,
    bad_request,
    not_found,
    ok,
    read_user_ip,
)
from jsonreply.testing import mounted_transport


ITEMS = {
    "1": {"id": "1", "name": "kettle"},
    "2": {"id": "2", "name": "toaster"},
}


async def list_items(_req: HttpRequest):
    return ok(list(ITEMS.values()))


async def get_item(req: HttpRequest):
    item_id = req.header("X-Item-Id")
    if not item_id.isdigit():
        return bad_request(ValueError(f"invalid id {item_id!r}"))
    if item_id not in ITEMS:
        return not_found(LookupError(f"item {item_id} not found"))
    return ok(ITEMS[item_id])


async def whoami(req: HttpRequest):
    return ok({"ip": read_user_ip(req)})


async def main() -> None:
    routes = {}
    add_handler(routes.__setitem__, "/items", list_items)
    add_handler(routes.__setitem__, "/item", get_item)
    add_handler(routes.__setitem__, "/whoami", whoami)

    async with httpx.AsyncClient(transport=mounted_transport(routes), base_url="http://example") as client:
        print("items:", await aextract_payload(await client.get("/items")))
        print("item 2:", await aextract_payload(await client.get("/item", headers={"X-Item-Id": "2"})))
        print("whoami:", await aextract_payload(await client.get("/whoami", headers={"X-Real-Ip": "1.2.3.4"})))

        for item_id in ("abc", "9"):
            try:
                await aextract_payload(await client.get("/item", headers={"X-Item-Id": item_id}))
            except RemoteError as e:
                print(f"item {item_id}: {e.status_code} {e}")


if __name__ == "__main__":
    anyio.run(main)
