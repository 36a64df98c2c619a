"""
Taleforge CLI - Command-line interface for the engine.

Usage:
    taleforge validate <content_file>             Validate a content bundle
    taleforge play <content_file> [--resume ID]   Play a content bundle
    taleforge saves [--game GAME_ID]              List saves, newest first
    taleforge show <save_id>                      Summarize a save
"""

import argparse
import sys

from .config import configure_logging, get_settings
from .errors import ContentError, SaveNotFoundError

DIRECTION_ALIASES = {"n": "north", "s": "south", "e": "east", "w": "west", "u": "up", "d": "down"}


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Taleforge - Narrative inventory and effects engine",
        prog="taleforge",
    )
    parser.add_argument("--saves-dir", help="Override TALEFORGE_SAVES_DIR")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a content bundle")
    validate_parser.add_argument("content_file", help="Path to content JSON file")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a content bundle")
    play_parser.add_argument("content_file", help="Path to content JSON file")
    play_parser.add_argument("--resume", help="Save id to continue from")

    # Saves command
    saves_parser = subparsers.add_parser("saves", help="List saves")
    saves_parser.add_argument("--game", help="Only saves of this game id")

    # Show command
    show_parser = subparsers.add_parser("show", help="Summarize a save")
    show_parser.add_argument("save_id", help="Save folder name")

    args = parser.parse_args(argv)
    configure_logging()

    if args.command == "validate":
        cmd_validate(args)
    elif args.command == "play":
        cmd_play(args)
    elif args.command == "saves":
        cmd_saves(args)
    elif args.command == "show":
        cmd_show(args)
    else:
        parser.print_help()
        sys.exit(1)


def _saves_dir(args):
    return args.saves_dir or get_settings().saves_dir


def cmd_validate(args):
    """Validate a content bundle."""
    from .content.loader import check_content_file

    print(f"Validating: {args.content_file}")
    try:
        result = check_content_file(args.content_file)
    except ContentError as e:
        print(f"Error: {e}")
        for message in getattr(e, "errors", []):
            print(f"  - {message}")
        sys.exit(1)

    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)

    print("OK")


def cmd_saves(args):
    """List saves."""
    from .persistence import list_saves

    saves = list_saves(game_id=args.game, saves_dir=_saves_dir(args))
    if not saves:
        print("No saves found.")
        return
    for save in saves:
        print(f"{save.id}  turn {save.turn}  {save.character_name} @ {save.current_scene_id}")


def cmd_show(args):
    """Summarize a save."""
    from .persistence import load_metadata, load_save

    try:
        metadata = load_metadata(args.save_id, _saves_dir(args))
        state = load_save(args.save_id, _saves_dir(args))
    except SaveNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Save: {metadata.id} (game {metadata.game_id})")
    print(f"Turn: {state.turn}")
    print(f"Scene: {state.current_scene_id}")
    for character in state.characters.values():
        stats = ", ".join(f"{name} {value:g}" for name, value in sorted(character.stats.items()))
        print(f"\n{character.name} [{character.id}]")
        if stats:
            print(f"  Stats: {stats}")
        if character.effects:
            effects = ", ".join(
                effect.id if effect.duration is None else f"{effect.id} ({effect.duration})"
                for effect in character.effects
            )
            print(f"  Effects: {effects}")
        carried = [entry.id for entry in character.inventory]
        print(f"  Inventory: {', '.join(carried) if carried else 'nothing'}")


def cmd_play(args):
    """Interactive play loop."""
    from .content.loader import load_content_file
    from .session import GameSession

    try:
        content = load_content_file(args.content_file)
    except ContentError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.resume:
        try:
            session = GameSession.resume(content, args.resume, _saves_dir(args))
        except SaveNotFoundError as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        session = GameSession(content)

    print(content.name)
    print(session.look())

    while True:
        try:
            line = input("\n> ").strip()
        except EOFError:
            break
        if not line:
            continue
        if line in ("quit", "exit"):
            break
        if line == "look":
            print(session.look())
            continue
        if line in ("inventory", "inv", "i"):
            print("\n".join(session.inventory_lines()) or "You are carrying nothing.")
            continue
        if line in ("effects", "status"):
            print("\n".join(session.effects_lines()))
            continue
        if line == "save":
            print(f"Saved as {session.save(_saves_dir(args))}")
            continue

        intent = parse_command(session, line)
        previous_log = len(session.state.log)
        turn = session.process(intent)
        if turn.success:
            for entry in session.state.log[previous_log:]:
                print(entry.text)
            if turn.state.current_scene_id != intent.scene_id:
                print(session.look())
        else:
            print(turn.narrative)


def parse_command(session, line):
    """
    Turn a typed line into an intent.

    Understands "take X", "drop X", "put X in Y", "go DIR"; anything else
    is treated as an object state verb ("light lantern", "open chest").
    """
    words = line.split()
    verb, rest = words[0].lower(), " ".join(words[1:])

    if verb in ("take", "get", "grab") or line.lower().startswith("pick up"):
        item = rest[3:].strip() if verb == "pick" else rest
        return session.intent("pickup", item_id=item or None, text=line)
    if verb == "drop":
        return session.intent("drop", item_id=rest or None, text=line)
    if verb in ("put", "move", "transfer") and " in " in f" {rest} ":
        item, _, container = rest.partition(" in ")
        return session.intent("transfer", target_id=container.strip() or None, item_id=item.strip() or None, text=line)
    if verb in ("go", "walk", "move"):
        return session.intent("move", target_id=DIRECTION_ALIASES.get(rest, rest) or None, text=line)
    if verb in DIRECTION_ALIASES or verb in DIRECTION_ALIASES.values():
        return session.intent("move", target_id=DIRECTION_ALIASES.get(verb, verb), text=line)

    object_id = words[-1] if len(words) > 1 else None
    phrase = " ".join(words[:-1]) if len(words) > 1 else line
    if object_id is not None and session.state.find_scene_object(object_id) is None:
        object_id, phrase = None, line
    return session.intent("set-state", target_id=object_id, text=line, verb=phrase)


if __name__ == "__main__":
    main()
