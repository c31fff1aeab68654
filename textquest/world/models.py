from __future__ import annotations

from dataclasses import dataclass, field

from textquest.core.errors import SessionCorruptedError


@dataclass(frozen=True)
class Item:
    item_id: str
    name: str
    description: str


@dataclass
class Room:
    # items and locked are the only fields that change after load
    room_id: str
    name: str
    description: str
    items: list[str] = field(default_factory=list)
    exits: dict[str, str] = field(default_factory=dict)
    locked: bool = False
    key_id: str | None = None


@dataclass(frozen=True)
class World:
    starting_room: str
    rooms: dict[str, Room]
    items: dict[str, Item]

    def get_room(self, room_id: str) -> Room | None:
        return self.rooms.get(room_id)

    def get_item(self, item_id: str) -> Item | None:
        return self.items.get(item_id)


@dataclass
class Session:
    """Mutable state of one playthrough.

    The session owns its world exclusively; unlocking flips ``Room.locked``
    on the world's rooms in place.
    """

    world: World
    current_room_id: str = ""
    inventory: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.current_room_id:
            self.current_room_id = self.world.starting_room

    def current_room(self) -> Room:
        room = self.world.get_room(self.current_room_id)
        if room is None:
            raise SessionCorruptedError(f"current room {self.current_room_id!r} is not in the world")
        return room

    def item_names(self, item_ids: list[str]) -> list[str]:
        names = []
        for item_id in item_ids:
            item = self.world.get_item(item_id)
            if item is not None:
                names.append(item.name)
        return names
