from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from textquest.core.errors import LoadError, WorldReferenceError
from textquest.world.models import Item, Room, World


def _load_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise LoadError(f"world file not found: {path}") from e
    except OSError as e:
        raise LoadError(f"unable to read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise LoadError(f"unable to decode {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise LoadError(f"unable to parse {path}: {e}") from e


def _require_str(record: dict[str, Any], key: str, where: str) -> str:
    value = record.get(key)
    if not isinstance(value, str):
        raise LoadError(f"{where} is missing string field '{key}'")
    return value


def _check_structure(data: Any) -> None:
    if not isinstance(data, dict):
        raise LoadError("world document must be an object")
    if not isinstance(data.get("starting_room"), str):
        raise LoadError("starting_room must be a string")

    items = data.get("items")
    if not isinstance(items, list):
        raise LoadError("items must be a list")
    item_ids: set[str] = set()
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise LoadError(f"items[{i}] must be an object")
        item_id = _require_str(item, "id", f"items[{i}]")
        _require_str(item, "name", f"item {item_id}")
        _require_str(item, "description", f"item {item_id}")
        if item_id in item_ids:
            raise LoadError(f"duplicate item id {item_id}")
        item_ids.add(item_id)

    rooms = data.get("rooms")
    if not isinstance(rooms, list):
        raise LoadError("rooms must be a list")
    room_ids: set[str] = set()
    for i, room in enumerate(rooms):
        if not isinstance(room, dict):
            raise LoadError(f"rooms[{i}] must be an object")
        room_id = _require_str(room, "id", f"rooms[{i}]")
        _require_str(room, "name", f"room {room_id}")
        _require_str(room, "description", f"room {room_id}")
        if room_id in room_ids:
            raise LoadError(f"duplicate room id {room_id}")
        room_ids.add(room_id)

        room_items = room.get("items", [])
        if not isinstance(room_items, list) or not all(isinstance(x, str) for x in room_items):
            raise LoadError(f"items in {room_id} must be a list of item ids")
        exits = room.get("exits", {})
        if not isinstance(exits, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in exits.items()
        ):
            raise LoadError(f"exits in {room_id} must map directions to room ids")
        folded: dict[str, str] = {}
        for direction in exits:
            other = folded.setdefault(direction.lower(), direction)
            if other != direction:
                raise LoadError(f"exits {other} and {direction} in {room_id} differ only in case")
        if not isinstance(room.get("locked", False), bool):
            raise LoadError(f"locked in {room_id} must be a boolean")
        key_id = room.get("key_id")
        if key_id is not None and not isinstance(key_id, str):
            raise LoadError(f"key_id in {room_id} must be a string")


def validate_world(data: Any) -> None:
    _check_structure(data)

    rooms = {room["id"]: room for room in data["rooms"]}
    items = {item["id"] for item in data["items"]}

    if data["starting_room"] not in rooms:
        raise WorldReferenceError(f"starting_room {data['starting_room']} does not exist")

    placed: dict[str, str] = {}
    for room_id, room in rooms.items():
        for direction, target in room.get("exits", {}).items():
            if target not in rooms:
                raise WorldReferenceError(f"exit {direction} in {room_id} points to unknown room {target}")

        for item_id in room.get("items", []):
            if item_id not in items:
                raise WorldReferenceError(f"unknown item {item_id} in {room_id}")
            if item_id in placed:
                raise WorldReferenceError(f"item {item_id} placed in both {placed[item_id]} and {room_id}")
            placed[item_id] = room_id

        # a locked room without a key is permanently locked, which is allowed
        key_id = room.get("key_id")
        if key_id is not None and key_id not in items:
            raise WorldReferenceError(f"unknown key_id {key_id} in {room_id}")


def build_world(data: dict[str, Any]) -> World:
    items: dict[str, Item] = {}
    for item in data["items"]:
        items[item["id"]] = Item(
            item_id=item["id"],
            name=item["name"],
            description=item["description"],
        )

    rooms: dict[str, Room] = {}
    for room in data["rooms"]:
        rooms[room["id"]] = Room(
            room_id=room["id"],
            name=room["name"],
            description=room["description"],
            items=list(room.get("items", [])),
            exits=dict(room.get("exits", {})),
            locked=bool(room.get("locked", False)),
            key_id=room.get("key_id"),
        )

    return World(starting_room=data["starting_room"], rooms=rooms, items=items)


def load_world(path: str | Path) -> World:
    data = _load_json(Path(path))
    validate_world(data)
    return build_world(data)
