from __future__ import annotations

from textquest.core.errors import SessionCorruptedError
from textquest.core.models import TurnResult
from textquest.world.models import Room, Session
from textquest.world.render import render_help


# Each movement token maps to the exit keys it may match, preferred first.
DIRECTION_ALIASES: dict[str, tuple[str, ...]] = {
    "n": ("n", "north"),
    "north": ("n", "north"),
    "s": ("s", "south"),
    "south": ("s", "south"),
    "e": ("e", "east"),
    "east": ("e", "east"),
    "w": ("w", "west"),
    "west": ("w", "west"),
}


def parse_command(line: str) -> tuple[str, str]:
    parts = line.split()
    if not parts:
        return "", ""
    return parts[0].lower(), " ".join(parts[1:])


class Engine:
    """Runs one command at a time against a session."""

    def __init__(self, session: Session):
        self.session = session

    def handle(self, command: str) -> TurnResult:
        verb, arg = parse_command(command)
        if not verb:
            return TurnResult("")

        if verb in DIRECTION_ALIASES:
            return self.move(verb)

        if verb == "go":
            if not arg:
                return TurnResult("Go where?")
            return self.move(arg)

        if verb in {"i", "inventory"}:
            return self.inventory()

        if verb in {"l", "look"}:
            return TurnResult("", refresh=True)

        if verb in {"take", "grab"}:
            return self.take(arg)

        if verb == "use":
            return self.use(arg)

        if verb in {"x", "examine"}:
            return self.examine(arg)

        if verb == "help":
            return TurnResult(render_help())

        if verb in {"q", "quit"}:
            return TurnResult("Goodbye!", quit=True)

        return TurnResult("I don't understand that command.")

    def move(self, direction: str) -> TurnResult:
        room = self.session.current_room()
        target_id = self._find_exit(room, direction)
        if target_id is None:
            return TurnResult("You can't go that way.")

        target = self.session.world.get_room(target_id)
        if target is None:
            raise SessionCorruptedError(f"exit {direction} in {room.room_id} points to unknown room {target_id}")

        # locked rooms block entry; the player stays put
        if target.locked:
            return TurnResult("The door is locked.")

        self.session.current_room_id = target_id
        return TurnResult("", refresh=True)

    def inventory(self) -> TurnResult:
        names = self.session.item_names(self.session.inventory)
        if not names:
            return TurnResult("You are not carrying anything.")
        return TurnResult("\n".join(["You are carrying:", *(f" - {name}" for name in names)]))

    def take(self, query: str) -> TurnResult:
        if not query:
            return TurnResult("Take what?")

        room = self.session.current_room()
        item_id = self._match_item(room.items, query)
        if item_id is None:
            return TurnResult("I don't see that here.")

        room.items.remove(item_id)
        self.session.inventory.append(item_id)
        item = self.session.world.items[item_id]
        return TurnResult(f"You picked up the {item.name}.")

    def use(self, query: str) -> TurnResult:
        if not query:
            return TurnResult("Use what?")

        item_id = self._match_item(self.session.inventory, query)
        if item_id is None:
            return TurnResult("You don't have that.")

        messages: list[str] = []
        for target_id in self.session.current_room().exits.values():
            target = self.session.world.get_room(target_id)
            if target is None:
                continue
            if target.locked and target.key_id == item_id:
                target.locked = False
                messages.append(f"You unlocked the door to the {target.name}!")

        if not messages:
            return TurnResult("You can't use that here.")
        return TurnResult("\n".join(messages))

    def examine(self, query: str) -> TurnResult:
        if not query:
            return TurnResult("Examine what?")

        item_id = self._match_item(self.session.inventory, query)
        if item_id is None:
            item_id = self._match_item(self.session.current_room().items, query)
        if item_id is None:
            return TurnResult("I don't see that here.")
        return TurnResult(self.session.world.items[item_id].description)

    def _find_exit(self, room: Room, direction: str) -> str | None:
        token = direction.strip().lower()
        candidates = DIRECTION_ALIASES.get(token, (token,))
        for candidate in candidates:
            if candidate in room.exits:
                return room.exits[candidate]

        # case-insensitive fallback, only after every exact key was tried
        folded: dict[str, str] = {}
        for key, target in room.exits.items():
            folded.setdefault(key.lower(), target)
        for candidate in candidates:
            if candidate in folded:
                return folded[candidate]
        return None

    def _match_item(self, item_ids: list[str], query: str) -> str | None:
        # first match in container order wins, not the closest name
        needle = query.lower()
        for item_id in item_ids:
            item = self.session.world.get_item(item_id)
            if item is not None and needle in item.name.lower():
                return item_id
        return None
