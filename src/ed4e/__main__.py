"""Entry point: run workflows for the sample character from the terminal."""

import asyncio
import shlex

from src.ed4e.config.settings import settings
from src.ed4e.core import ActorDocument, ChatLog, ConsolePrompt, StateManager, StepDiceEvaluator, WorkflowContext
from src.ed4e.scenarios import create_test_character, create_test_opponent
from src.ed4e.storage import Database
from src.ed4e.utils.logging import setup_logging
from src.ed4e.workflows import (
    AttackWorkflow,
    AttributeWorkflow,
    ItemHistoryWorkflow,
    JumpUpWorkflow,
    KnockdownWorkflow,
    RecoveryWorkflow,
    SpellcastingWorkflow,
    SubstituteWorkflow,
)

HELP = """Commands:
  attribute <dex|str|tou|per|wil|cha>
  substitute <attribute> [mode]
  attack [weapon|unarmed|tail]
  jumpup
  knockdown [difficulty]
  recover [recovery|fullRest|recoverStun]
  cast <spell id>
  history <thread item id>
  status
  quit"""


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────
def build_workflow(command: str, args: list[str], actor: ActorDocument, opponent: ActorDocument, context: WorkflowContext):
    """Map one command line to a workflow. Returns None for unknown commands."""
    match command:
        case "attribute":
            return AttributeWorkflow(actor, context, attribute=args[0] if args else "dex")
        case "substitute":
            return SubstituteWorkflow(
                actor, context, attribute=args[0] if args else "dex",
                mode=args[1] if len(args) > 1 else None, targets=[opponent],
            )
        case "attack":
            return AttackWorkflow(actor, context, attack_type=args[0] if args else "weapon", targets=[opponent])
        case "jumpup":
            return JumpUpWorkflow(actor, context)
        case "knockdown":
            return KnockdownWorkflow(actor, context, difficulty=int(args[0]) if args else None)
        case "recover":
            return RecoveryWorkflow(actor, context, recovery_mode=args[0] if args else "recovery")
        case "cast":
            spell = actor.get_item(args[0]) if args else None
            if spell is None:
                print("Spells: " + ", ".join(spell.id for spell in actor.spells))
                return None
            return SpellcastingWorkflow(spell, actor, context, targets=[opponent])
        case "history":
            threads = actor.items_of_type("thread")
            if not args or actor.get_item(args[0]) not in threads:
                print("Thread items: " + ", ".join(item.id for item in threads))
                return None
            return ItemHistoryWorkflow(actor, context, item_id=args[0])
    return None


def print_status(actor: ActorDocument) -> None:
    system = actor.system
    damage = system.health.damage
    print(f"{system.name}: damage {damage.standard} (stun {damage.stun}), wounds {system.health.wounds}")
    print(f"  karma {system.karma.value}/{system.karma.max}, recovery tests {system.recovery_tests.value}/{system.recovery_tests.max}")
    flags = [name for name, active in system.conditions.model_dump().items() if active]
    print(f"  conditions: {', '.join(flags) or 'none'}")
    for matrix in actor.matrices:
        print(f"  {matrix.name} ({matrix.id}): {', '.join(matrix.spells) or 'empty'}")


# ─────────────────────────────────────────────────────────────────────────────
# Game Loop
# ─────────────────────────────────────────────────────────────────────────────
def get_player_input() -> str | None:
    """Get input from the player, handling EOF and interrupts."""
    try:
        text = input("\n> ").strip()
        return text if text else None
    except (EOFError, KeyboardInterrupt):
        return "quit"


async def game_loop(state: StateManager, context: WorkflowContext) -> None:
    actor = state.document("actor_aelin")
    opponent = state.document("actor_ork")

    while True:
        player_input = get_player_input()
        if player_input is None:
            print(HELP)
            continue

        command, *args = shlex.split(player_input)
        command = command.lower()
        if command in ("quit", "exit", "q"):
            print("Farewell.")
            break
        if command == "status":
            print_status(actor)
            continue

        workflow = build_workflow(command, args, actor, opponent, context)
        if workflow is None:
            print(HELP)
            continue

        result = await workflow.execute()
        for message in context.log.messages[-5:]:
            print(f"[{message.level}] {message.flavor} {message.content}".replace("  ", " "))
        context.log.messages.clear()
        print(f"({workflow.name} {workflow.status.value}: {result if not hasattr(result, 'total') else result.total})")


def main() -> None:
    """Main entry point."""
    logger = setup_logging(
        level=settings.log_level,
        log_file=settings.log_file,
        enable_color=settings.enable_color,
    )
    logger.info("Starting ED4E workflow console")
    logger.debug(f"Configuration: {settings}")

    database = Database(settings.database_path)
    database.init_schema()
    state = StateManager(database=database)
    for actor in (create_test_character(), create_test_opponent()):
        state.add_actor(actor)
    context = WorkflowContext(
        prompt=ConsolePrompt(),
        evaluator=StepDiceEvaluator(),
        log=ChatLog(database),
        settings=settings,
    )

    print("Welcome! You are Aelin Vey. Type a command, or press enter for help.")
    try:
        asyncio.run(game_loop(state, context))
    finally:
        database.close()


if __name__ == "__main__":
    main()
