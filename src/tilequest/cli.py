from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from . import __version__
from .adversary import AdversaryKind
from .combat import AttackType
from .engine import Action, TurnEngine, new_game
from .errors import TileQuestError
from .logging_config import configure_logging
from .settings import Settings
from .world.state import Outcome, TurnSummary, WorldState

logger = logging.getLogger(__name__)

PLAYER_GLYPH = "@"

ADVERSARY_GLYPHS: Dict[AdversaryKind, str] = {
    AdversaryKind.SLIME: "s",
    AdversaryKind.SKELETON: "k",
    AdversaryKind.BAT: "b",
    AdversaryKind.GOBLIN: "g",
    AdversaryKind.DARK_KNIGHT: "K",
    AdversaryKind.BOSS: "B",
}

_MOVES: Dict[str, Action] = {
    "n": Action.MOVE_NORTH,
    "north": Action.MOVE_NORTH,
    "s": Action.MOVE_SOUTH,
    "south": Action.MOVE_SOUTH,
    "e": Action.MOVE_EAST,
    "east": Action.MOVE_EAST,
    "w": Action.MOVE_WEST,
    "west": Action.MOVE_WEST,
}

_ATTACK_ALIASES: Dict[str, AttackType] = {
    "slash": AttackType.SWORD_SLASH,
    "spin": AttackType.SPIN_ATTACK,
    "bow": AttackType.BOW_SHOT,
    "magic": AttackType.MAGIC_ATTACK,
    "bash": AttackType.SHIELD_BASH,
}

HELP_TEXT = """Commands:
  n/s/e/w        move north/south/east/west
  a [type]       attack (slash, spin, bow, magic, bash)
  u <item>       use an item, e.g. 'u health_potion'
  eq <item>      equip a weapon or armor
  x [item]       interact; in a shop, buy an item (default health_potion)
  .              wait a turn
  i              show inventory (free)
  stat           show status (free)
  h              this help
  q              quit"""


@dataclass(frozen=True)
class Command:
    """A parsed line of input.

    ``action`` is None for commands handled by the front end alone
    (``local`` is then "help" or "status").
    """

    action: Optional[Action] = None
    item_id: Optional[str] = None
    attack_type: Optional[AttackType] = None
    local: Optional[str] = None


def parse_input(line: str) -> Command:
    """Parse one line of player input.

    Raises:
        ValueError: The input is empty, unknown or missing an argument.
    """
    parts = line.strip().lower().split()
    if not parts:
        raise ValueError("Type 'h' for help.")
    verb, args = parts[0], parts[1:]

    if verb in _MOVES:
        return Command(action=_MOVES[verb])
    if verb in ("a", "attack"):
        if not args:
            return Command(action=Action.ATTACK, attack_type=AttackType.SWORD_SLASH)
        name = args[0]
        attack_type = _ATTACK_ALIASES.get(name)
        if attack_type is None:
            try:
                attack_type = AttackType(name)
            except ValueError:
                raise ValueError(f"Unknown attack type: {name}") from None
        return Command(action=Action.ATTACK, attack_type=attack_type)
    if verb in ("u", "use"):
        if not args:
            raise ValueError("Use what? Try 'u health_potion'.")
        return Command(action=Action.USE_ITEM, item_id=args[0])
    if verb in ("eq", "equip"):
        if not args:
            raise ValueError("Equip what? Try 'eq steel_sword'.")
        return Command(action=Action.EQUIP, item_id=args[0])
    if verb in ("x", "interact"):
        return Command(action=Action.INTERACT, item_id=args[0] if args else None)
    if verb in (".", "wait"):
        return Command(action=Action.WAIT)
    if verb in ("i", "inv", "inventory"):
        return Command(action=Action.OPEN_INVENTORY)
    if verb in ("q", "quit"):
        return Command(action=Action.QUIT)
    if verb in ("h", "help", "?"):
        return Command(local="help")
    if verb in ("stat", "status"):
        return Command(local="status")
    raise ValueError(f"Unknown command: {verb!r}. Type 'h' for help.")


def render_map(world: WorldState) -> List[str]:
    rows = [list(line) for line in world.grid.render_lines()]
    for adv in world.adversaries:
        rows[adv.position.y][adv.position.x] = ADVERSARY_GLYPHS[adv.kind]
    rows[world.position.y][world.position.x] = PLAYER_GLYPH
    return ["".join(row) for row in rows]


def render_status(summary: TurnSummary) -> str:
    c = summary.character
    return (
        f"Turn {summary.turn} | HP {c.health}/{c.max_health} | Lv {c.level} | EXP {c.experience} "
        f"| ATK {c.attack} DEF {c.defense} | Gold {summary.inventory.gold} | At {summary.position}"
    )


def render_summary(summary: TurnSummary) -> List[str]:
    lines = [event.message for event in summary.events]
    lines.append(render_status(summary))
    if summary.game_over and summary.outcome is not None:
        lines.append(f"*** GAME OVER: {summary.outcome.value.upper()} ***")
    return lines


def run(
    engine: TurnEngine,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> Optional[Outcome]:
    """Read commands until the game ends; returns the outcome.

    End of input is treated as quitting.
    """
    output_fn("Welcome to TileQuest! Type 'h' for help.")
    for line in render_map(engine.world):
        output_fn(line)
    output_fn(render_status(engine.status()))

    while not engine.world.game_over:
        try:
            raw = input_fn("> ")
        except EOFError:
            raw = "q"
        try:
            command = parse_input(raw)
        except ValueError as exc:
            output_fn(str(exc))
            continue

        if command.local == "help":
            output_fn(HELP_TEXT)
            continue
        if command.local == "status":
            output_fn(render_status(engine.status()))
            continue

        summary = engine.submit(command.action, item_id=command.item_id, attack_type=command.attack_type)
        for line in render_summary(summary):
            output_fn(line)
        if command.action is not None and command.action.direction is not None and not summary.game_over:
            for line in render_map(engine.world):
                output_fn(line)
    return engine.world.outcome


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="tilequest",
        description="TileQuest - a turn-based tile adventure in the terminal",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--settings",
        dest="settings_path",
        type=Path,
        default=None,
        help="Path to a user settings YAML file to load/override defaults.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible games")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    configure_logging(default_level=level)

    try:
        settings = Settings.load(user_path=args.settings_path, seed=args.seed)
        engine = new_game(settings)
    except TileQuestError as exc:
        logger.error("Could not start game: %s", exc)
        return 2

    outcome = run(engine)
    return 0 if outcome in (Outcome.VICTORY, Outcome.QUIT) else 1
