from __future__ import annotations

from textquest.world.models import Session


HELP_TEXT = """Commands:
  n, s, e, w - Move
  go <direction> - Move along any exit
  take <item> - Pick up an item
  use <item> - Use an item (e.g., to unlock doors)
  examine <item> - Describe an item you carry or can see
  i / inventory - Show carried items
  l / look - Refresh screen
  q / quit - Quit game"""


def render_room(session: Session) -> str:
    room = session.current_room()
    lines: list[str] = []
    lines.append(f"=== {room.name} ===")
    lines.append(room.description)

    names = session.item_names(room.items)
    if names:
        lines.append("")
        lines.append("You see:")
        lines.extend(f" - {name}" for name in names)

    lines.append("")
    if room.exits:
        lines.append("Exits: " + ", ".join(room.exits.keys()))
    else:
        lines.append("Exits: none")

    return "\n".join(lines)


def render_help() -> str:
    return HELP_TEXT
