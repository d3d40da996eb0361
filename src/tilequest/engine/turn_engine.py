from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Union

from .. import adversary as adversary_model
from ..adversary import AdversaryState
from ..character import CharacterStats, levels_gained
from ..combat import AttackType, Combatant
from ..core.geometry import Direction, Position, manhattan
from ..core.rng import RNG
from ..errors import InsufficientFundsError, InventoryFullError, ItemNotFoundError, ItemNotUsableError
from ..interfaces import Rules
from ..inventory import Inventory
from ..items.catalog import ItemCatalog, default_catalog
from ..settings import Settings
from ..world.loader import load_world
from ..world.state import Chest, EventKind, GameEvent, Outcome, TurnPhase, TurnSummary, WorldState
from ..world.tiles import TileType
from .actions import Action

logger = logging.getLogger(__name__)

DEFAULT_PURCHASE = "health_potion"
DEFAULT_HINT = "It's dangerous to go alone."


@dataclass
class _Draft:
    """Working copy of the world values a turn may change.

    Nothing here touches the world until :meth:`TurnEngine._commit`.
    """

    position: Position
    stats: CharacterStats
    inventory: Inventory
    adversaries: List[AdversaryState]
    chests: Dict[Position, Chest]
    opened: List[Position] = field(default_factory=list)
    events: List[GameEvent] = field(default_factory=list)

    @classmethod
    def from_world(cls, world: WorldState) -> "_Draft":
        return cls(
            position=world.position,
            stats=world.stats,
            inventory=world.inventory,
            adversaries=list(world.adversaries),
            chests=dict(world.chests),
        )

    def emit(self, kind: EventKind, message: str, **data) -> None:
        self.events.append(GameEvent(kind=kind, message=message, data=data))

    def adversary_at(self, pos: Position) -> Optional[AdversaryState]:
        for adv in self.adversaries:
            if adv.position == pos:
                return adv
        return None


class TurnEngine:
    """Drive a :class:`WorldState` one submitted action at a time.

    Each turn resolves in a fixed order: the player's action, then every live
    adversary in spawn order, then tile effects. The turn works on a draft and
    commits it in one step, so a rejected action never leaves partial changes.
    After GAME_OVER every submission is rejected without touching state.
    """

    def __init__(
        self,
        world: WorldState,
        settings: Optional[Settings] = None,
        rng: Optional[RNG] = None,
        rules: Optional[Rules] = None,
        catalog: Optional[ItemCatalog] = None,
    ) -> None:
        self.world = world
        self.settings = settings or Settings()
        self.rng = rng or RNG(self.settings.seed)
        self.rules = rules or Rules.from_settings(self.settings)
        self.catalog = catalog or default_catalog()

    @property
    def phase(self) -> TurnPhase:
        return self.world.phase

    # ---- Public API ------------------------------------------------------
    def submit(
        self,
        action: Union[Action, str],
        *,
        item_id: Optional[str] = None,
        attack_type: Optional[Union[AttackType, str]] = None,
    ) -> TurnSummary:
        action = Action(action)
        world = self.world
        if world.game_over:
            logger.warning("Action %s rejected: game is over (%s)", action.value, world.outcome)
            return self._snapshot(
                action.value,
                [GameEvent(EventKind.REJECTED, "The game is over.", {"action": action.value})],
            )

        if action.is_free:
            return self._snapshot(
                action.value,
                [GameEvent(EventKind.INVENTORY, self._describe_inventory(world.inventory), {})],
            )

        draft = _Draft.from_world(world)
        try:
            outcome = self._resolve(action, draft, item_id, attack_type)
        except Exception:
            # The draft is discarded; only the phase has to be put back
            logger.exception("Turn %d (%s) aborted", world.turn, action.value)
            self._set_phase(TurnPhase.AWAITING_INPUT)
            raise
        return self._commit(action, draft, outcome)

    def status(self) -> TurnSummary:
        """Current snapshot; takes no turn."""
        return self._snapshot("status", [])

    # ---- Phases ----------------------------------------------------------
    def _resolve(
        self,
        action: Action,
        draft: _Draft,
        item_id: Optional[str],
        attack_type: Optional[Union[AttackType, str]],
    ) -> Optional[Outcome]:
        entered = False
        self._set_phase(TurnPhase.RESOLVING_PLAYER_ACTION)
        if action.direction is not None:
            entered = self._player_move(draft, action.direction)
        elif action is Action.ATTACK:
            self._player_attack(draft, AttackType(attack_type or AttackType.SWORD_SLASH))
        elif action is Action.USE_ITEM:
            self._use_item(draft, item_id)
        elif action is Action.EQUIP:
            self._equip(draft, item_id)
        elif action is Action.WAIT:
            draft.emit(EventKind.WAITED, "You wait.")
        elif action is Action.QUIT:
            draft.emit(EventKind.QUIT, "You leave the adventure.")
            return Outcome.QUIT

        self._set_phase(TurnPhase.RESOLVING_ADVERSARIES)
        self._resolve_adversaries(draft)

        self._set_phase(TurnPhase.APPLYING_WORLD_EFFECTS)
        if not self.rules.character.is_defeated(draft.stats):
            if entered:
                self._on_enter(draft)
            elif action is Action.INTERACT:
                self._interact(draft, item_id)

        if self.rules.character.is_defeated(draft.stats):
            draft.emit(EventKind.CHARACTER_DEFEATED, "You have been defeated.")
            return Outcome.DEFEAT
        if not draft.adversaries:
            draft.emit(EventKind.VICTORY, "Every foe has fallen. Victory!")
            return Outcome.VICTORY
        return None

    def _set_phase(self, phase: TurnPhase) -> None:
        logger.debug("Turn %d: %s -> %s", self.world.turn, self.world.phase.value, phase.value)
        self.world.phase = phase

    def _commit(self, action: Action, draft: _Draft, outcome: Optional[Outcome]) -> TurnSummary:
        world = self.world
        world.position = draft.position
        world.stats = draft.stats
        world.inventory = draft.inventory
        world.adversaries = tuple(draft.adversaries)
        world.chests = draft.chests
        for pos in draft.opened:
            world.grid.set_tile(pos, TileType.OPEN)
        world.turn += 1
        if outcome is not None:
            world.outcome = outcome
            self._set_phase(TurnPhase.GAME_OVER)
            logger.info("Game over after turn %d: %s", world.turn, outcome.value)
        else:
            self._set_phase(TurnPhase.AWAITING_INPUT)

        summary = self._snapshot(action.value, draft.events)
        world.event_log.append(summary)
        logger.info("Turn %d (%s): %d events", world.turn, action.value, len(draft.events))
        return summary

    def _snapshot(self, action: str, events: List[GameEvent]) -> TurnSummary:
        world = self.world
        return TurnSummary(
            turn=world.turn,
            action=action,
            events=tuple(events),
            character=world.stats,
            position=world.position,
            inventory=world.inventory,
            adversaries=tuple(world.adversaries),
            phase=world.phase,
            game_over=world.game_over,
            outcome=world.outcome,
        )

    # ---- Player actions --------------------------------------------------
    def _player_move(self, draft: _Draft, direction: Direction) -> bool:
        target = draft.position.step(direction)
        grid = self.world.grid
        if not grid.in_bounds(target):
            reason = "the edge of the world"
        elif not grid.is_walkable(target):
            reason = grid.tile_at(target).value
        elif draft.adversary_at(target) is not None:
            reason = draft.adversary_at(target).name
        else:
            reason = None
        if reason is not None:
            logger.debug("Move %s to %s blocked by %s", direction.name, target, reason)
            draft.emit(EventKind.BLOCKED, f"You can't go that way ({reason}).", target=target.as_tuple())
            return False
        draft.position = target
        draft.emit(
            EventKind.MOVED,
            f"You move {direction.name.lower()} to {target} in {self.world.area_name(target)}.",
            position=target.as_tuple(),
        )
        return True

    def _player_combatant(self, draft: _Draft) -> Combatant:
        inv_rules = self.rules.inventory
        return Combatant(
            attack=draft.stats.attack,
            defense=draft.stats.defense + inv_rules.defense_bonus(draft.inventory),
            health=draft.stats.health,
            max_health=draft.stats.max_health,
            equipment_bonus=inv_rules.attack_bonus(draft.inventory),
        )

    def _player_attack(self, draft: _Draft, attack_type: AttackType) -> None:
        combat = self.rules.combat
        player = self._player_combatant(draft)
        if not combat.can_use(attack_type, player):
            draft.emit(
                EventKind.ATTACK_UNAVAILABLE,
                f"You are too weak to use {attack_type.value.replace('_', ' ')}.",
                attack_type=attack_type.value,
            )
            return

        profile = attack_type.profile
        in_reach = [a for a in draft.adversaries if manhattan(a.position, draft.position) <= profile.reach]
        if not in_reach:
            draft.emit(EventKind.NO_TARGET, "There is nothing to attack.", attack_type=attack_type.value)
            return
        # min() keeps the first of equal distances, i.e. spawn order
        targets = in_reach if profile.area else [min(in_reach, key=lambda a: manhattan(a.position, draft.position))]

        for target in targets:
            result = combat.player_attack(attack_type, player, target.as_combatant(), target.exp_reward, self.rng)
            damaged = adversary_model.apply_damage(target, result.damage)
            draft.emit(
                EventKind.ATTACK,
                f"{result.message} ({target.name})",
                uid=target.uid,
                damage=result.damage,
                critical=result.critical,
                attack_type=attack_type.value,
            )
            if adversary_model.is_defeated(damaged):
                draft.adversaries = [a for a in draft.adversaries if a.uid != target.uid]
                draft.emit(
                    EventKind.ADVERSARY_DEFEATED,
                    f"The {target.name} is defeated! +{result.experience} EXP",
                    uid=target.uid,
                    experience=result.experience,
                )
                logger.info("%s #%d defeated", target.name, target.uid)
                self._award_experience(draft, result.experience)
            else:
                draft.adversaries = [damaged if a.uid == target.uid else a for a in draft.adversaries]

    def _award_experience(self, draft: _Draft, exp: int) -> None:
        before = draft.stats
        draft.stats = self.rules.character.gain_experience(before, exp)
        for level in levels_gained(before, draft.stats):
            logger.info("Level up: %d", level)
            draft.emit(EventKind.LEVEL_UP, f"Level up! You are now level {level}.", level=level)

    def _use_item(self, draft: _Draft, item_id: Optional[str]) -> None:
        if not item_id:
            draft.emit(EventKind.ITEM_NOT_FOUND, "Use what?")
            return
        try:
            inv, stats = self.rules.inventory.use_consumable(draft.inventory, item_id, draft.stats)
        except ItemNotFoundError as exc:
            draft.emit(EventKind.ITEM_NOT_FOUND, str(exc), item_id=item_id)
            return
        except ItemNotUsableError as exc:
            draft.emit(EventKind.ITEM_NOT_USABLE, str(exc), item_id=item_id)
            return
        draft.inventory, draft.stats = inv, stats
        draft.emit(EventKind.ITEM_USED, f"You use the {self._item_name(item_id)}.", item_id=item_id)

    def _equip(self, draft: _Draft, item_id: Optional[str]) -> None:
        if not item_id:
            draft.emit(EventKind.ITEM_NOT_FOUND, "Equip what?")
            return
        try:
            draft.inventory = self.rules.inventory.equip(draft.inventory, item_id)
        except ItemNotFoundError as exc:
            draft.emit(EventKind.ITEM_NOT_FOUND, str(exc), item_id=item_id)
            return
        except ItemNotUsableError as exc:
            draft.emit(EventKind.ITEM_NOT_USABLE, str(exc), item_id=item_id)
            return
        draft.emit(EventKind.EQUIPPED, f"You equip the {self._item_name(item_id)}.", item_id=item_id)

    # ---- Adversaries -----------------------------------------------------
    def _resolve_adversaries(self, draft: _Draft) -> None:
        ai = self.rules.ai
        turn = self.world.turn
        grid = self.world.grid
        for index in range(len(draft.adversaries)):
            adv = draft.adversaries[index]
            adv = replace(adv, behavior=ai.update_behavior(adv, draft.position))

            if ai.should_attack(adv, draft.position, turn):
                attack_type = ai.attack_type_for(adv, turn)
                result = self.rules.combat.enemy_attack(
                    adv.as_combatant(), self._player_combatant(draft), self.rng, attack_type=attack_type
                )
                draft.stats = self.rules.character.apply_damage(draft.stats, result.damage)
                draft.emit(
                    EventKind.ADVERSARY_ATTACK,
                    f"The {adv.name} attacks! {result.message}",
                    uid=adv.uid,
                    damage=result.damage,
                    critical=result.critical,
                )
            else:
                occupied = {a.position for j, a in enumerate(draft.adversaries) if j != index}

                def is_open(pos: Position, adv: AdversaryState = adv) -> bool:
                    return pos != draft.position and pos not in occupied and grid.is_walkable(pos, flying=adv.flying)

                target = ai.calculate_move(adv, draft.position, turn=turn, rng=self.rng, is_open=is_open)
                if target != adv.position:
                    draft.emit(
                        EventKind.ADVERSARY_MOVED,
                        f"The {adv.name} moves to {target}.",
                        uid=adv.uid,
                        position=target.as_tuple(),
                    )
                    adv = replace(adv, position=target)

            draft.adversaries[index] = adv
            if self.rules.character.is_defeated(draft.stats):
                break

    # ---- Tile effects ----------------------------------------------------
    def _on_enter(self, draft: _Draft) -> None:
        tile = self.world.grid.tile_at(draft.position)
        if tile is TileType.CHEST:
            self._open_chest(draft)
        elif tile is TileType.SHOP:
            self._show_shop(draft)
        elif tile is TileType.NPC:
            self._talk(draft)
        elif tile is TileType.DUNGEON_ENTRANCE:
            self._enter_dungeon(draft)

    def _interact(self, draft: _Draft, item_id: Optional[str]) -> None:
        tile = self.world.grid.tile_at(draft.position)
        if tile is TileType.SHOP:
            self._buy(draft, item_id or DEFAULT_PURCHASE)
        elif tile is TileType.NPC:
            self._talk(draft)
        elif tile is TileType.CHEST and draft.position in draft.chests:
            self._open_chest(draft)
        else:
            draft.emit(EventKind.NOTHING_HERE, "There is nothing here.")

    def _open_chest(self, draft: _Draft) -> None:
        pos = draft.position
        chest = draft.chests.get(pos)
        if chest is None:
            draft.opened.append(pos)
            draft.emit(EventKind.CHEST_OPENED, "The chest is empty.", gold=0, item_id=None)
            return

        gold = chest.gold
        inv = self.rules.inventory.add_gold(draft.inventory, gold)
        granted: Optional[str] = None
        left: Optional[str] = None
        if chest.item_id is not None:
            try:
                inv = self.rules.inventory.add_item(inv, self.catalog.get(chest.item_id))
                granted = chest.item_id
            except InventoryFullError as exc:
                left = chest.item_id
                draft.emit(EventKind.INVENTORY_FULL, str(exc), item_id=chest.item_id)
        draft.inventory = inv

        parts = []
        if gold:
            parts.append(f"{gold} gold")
        if granted:
            parts.append(f"a {self._item_name(granted)}")
        found = " and ".join(parts) if parts else "nothing"
        draft.emit(EventKind.CHEST_OPENED, f"You open the chest and find {found}!", gold=gold, item_id=granted)

        if left is None:
            del draft.chests[pos]
            draft.opened.append(pos)
        else:
            draft.chests[pos] = Chest(gold=0, item_id=left)
        logger.debug("Chest at %s: gold=%d item=%s left=%s", pos, gold, granted, left)

    def _show_shop(self, draft: _Draft) -> None:
        stock = [
            {"id": item.id, "name": item.name, "price": item.price}
            for item in (self.catalog.get(i) for i in self.world.shop_stock)
        ]
        listing = ", ".join(f"{s['name']} ({s['price']}g)" for s in stock) or "nothing"
        draft.emit(EventKind.SHOP, f"Welcome to the shop! For sale: {listing}.", stock=stock)

    def _buy(self, draft: _Draft, item_id: str) -> None:
        if item_id not in self.world.shop_stock or item_id not in self.catalog:
            draft.emit(EventKind.ITEM_NOT_FOUND, f"The shop doesn't sell {item_id}.", item_id=item_id)
            return
        item = self.catalog.get(item_id)
        inv_rules = self.rules.inventory
        try:
            inv = inv_rules.spend_gold(draft.inventory, item.price)
            inv = inv_rules.add_item(inv, item)
        except InsufficientFundsError as exc:
            draft.emit(EventKind.INSUFFICIENT_FUNDS, str(exc), item_id=item_id, price=item.price)
            return
        except InventoryFullError as exc:
            draft.emit(EventKind.INVENTORY_FULL, str(exc), item_id=item_id)
            return
        draft.inventory = inv
        draft.emit(
            EventKind.PURCHASED, f"You buy a {item.name} for {item.price} gold.", item_id=item_id, price=item.price
        )

    def _talk(self, draft: _Draft) -> None:
        hints = self.world.npc_hints
        hint = hints[self.world.turn % len(hints)] if hints else DEFAULT_HINT
        draft.emit(EventKind.NPC, f'The villager says: "{hint}"', hint=hint)

    def _enter_dungeon(self, draft: _Draft) -> None:
        target = self.world.dungeon_links.get(draft.position)
        if target is None:
            draft.emit(EventKind.DUNGEON, "The entrance is sealed.")
            return
        if draft.adversary_at(target) is not None or not self.world.grid.is_walkable(target):
            draft.emit(EventKind.DUNGEON, "Something blocks the other end of the passage.")
            return
        draft.position = target
        draft.emit(
            EventKind.DUNGEON,
            f"You travel through the dungeon and emerge at {target}.",
            position=target.as_tuple(),
        )

    # ---- Text helpers ----------------------------------------------------
    def _item_name(self, item_id: str) -> str:
        return self.catalog.get(item_id).name if item_id in self.catalog else item_id

    def _describe_inventory(self, inv: Inventory) -> str:
        names = ", ".join(item.describe() for item in inv.items) or "empty"
        weapon = self._item_name(inv.weapon) if inv.weapon else "none"
        armor = self._item_name(inv.armor) if inv.armor else "none"
        return f"Gold: {inv.gold} | Weapon: {weapon} | Armor: {armor} | Items ({len(inv.items)}/{inv.capacity}): {names}"


def new_game(settings: Optional[Settings] = None, rules: Optional[Rules] = None) -> TurnEngine:
    """Load the configured map and wire a ready-to-play engine."""
    settings = settings or Settings.load()
    world = load_world(settings)
    logger.info("New game (seed=%s)", settings.seed)
    return TurnEngine(world, settings=settings, rng=RNG(settings.seed), rules=rules)
