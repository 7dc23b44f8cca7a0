"""
Sample actors for the CLI and the tests.
"""
from src.ed4e.models import (
    Ability,
    Actor,
    ActorType,
    Discipline,
    Grimoire,
    ItemStatus,
    Matrix,
    Spell,
    ThreadItem,
    TruePattern,
    Weapon,
)
from src.ed4e.models.actor import (
    ArmorValues,
    AttributeScore,
    BonusPool,
    Defenses,
    Health,
    Knockdown,
    RecoveryTests,
)


def create_test_character() -> Actor:
    """
    Creates a test character: Aelin Vey, a third circle elementalist
    with a matrix, her own grimoire, a borrowed one and an unexplored
    thread item.

    Returns:
        Actor: A fully populated character ready for testing
    """

    # ==================== ABILITIES ====================

    abilities = [
        Ability(id="ability_spellcasting", name="Spellcasting", edid="spellcasting", attribute="per", rank=3),
        Ability(id="ability_thread_weaving", name="Elementalism", edid="thread-weaving", attribute="per", rank=3),
        Ability(id="ability_patterncraft", name="Patterncraft", edid="patterncraft", type="skill", attribute="per", rank=2),
        Ability(id="ability_unarmed", name="Unarmed Combat", edid="unarmed-combat", type="skill", attribute="dex", rank=1),
        Ability(id="ability_melee", name="Melee Weapons", edid="melee-weapons", attribute="dex", rank=2),
        Ability(id="ability_acrobatics", name="Acrobatic Defense", attribute="dex", rank=2, strain=1),
        Ability(id="ability_item_history", name="Item History", edid="item-history", type="skill", attribute="per", rank=2),
    ]

    # ==================== WEAPONS ====================

    weapons = [
        Weapon(
            id="weapon_dagger",
            name="Dagger",
            description="A plain steel dagger",
            item_status=ItemStatus.CARRIED,
            wielding_type=ItemStatus.MAIN_HAND,
            damage_step=2,
        ),
        Weapon(
            id="weapon_staff",
            name="Quarterstaff",
            description="Ash wood, bound in copper",
            item_status=ItemStatus.CARRIED,
            wielding_type=ItemStatus.TWO_HANDS,
            damage_step=4,
        ),
    ]

    # ==================== SPELLS ====================

    spells = [
        Spell(id="spell_earth_darts", name="Earth Darts", circle=1, threads_required=0,
              weaving_difficulty=6),
        Spell(id="spell_flameweapon", name="Flameweapon", circle=1, threads_required=1,
              weaving_difficulty=6, casting_difficulty=6),
        Spell(id="spell_fire_ball", name="Fireball", circle=3, threads_required=2,
              weaving_difficulty=8),
        Spell(id="spell_ice_mace", name="Ice Mace and Chain", circle=4, threads_required=1,
              weaving_difficulty=10, learned=False),
    ]

    # ==================== MAGICAL ITEMS ====================

    magic_items = [
        Discipline(id="discipline_elementalist", name="Elementalist", level=3),
        Matrix(id="matrix_1", name="Spell Matrix", rank=3, spells=["spell_earth_darts"]),
        Matrix(id="matrix_2", name="Spell Matrix", rank=3, spells=[]),
        Grimoire(
            id="grimoire_own",
            name="Aelin's Grimoire",
            owner_id="actor_aelin",
            spells=["spell_earth_darts", "spell_flameweapon", "spell_fire_ball"],
        ),
        Grimoire(
            id="grimoire_borrowed",
            name="Master Tobar's Grimoire",
            owner_id="actor_tobar",
            spells=["spell_ice_mace"],
        ),
        ThreadItem(
            id="thread_ring",
            name="Ring of the Wandering Flame",
            true_pattern=TruePattern(
                mystic_defense=8,
                key_knowledges=[
                    "Who forged the ring?",
                    "Which spirit was bound into the ring?",
                    "Where did the ring's first bearer die?",
                ],
            ),
        ),
    ]

    # ==================== CHARACTER ====================

    return Actor(
        id="actor_aelin",
        name="Aelin Vey",
        type=ActorType.CHARACTER,
        attributes={
            "dex": AttributeScore(value=13, step=6),
            "str": AttributeScore(value=11, step=5),
            "tou": AttributeScore(value=12, step=6),
            "per": AttributeScore(value=17, step=7),
            "wil": AttributeScore(value=15, step=6),
            "cha": AttributeScore(value=10, step=5),
        },
        karma=BonusPool(value=10, max=15, step=4),
        devotion=BonusPool(value=0, max=0, step=3),
        health=Health(wound_threshold=9, unconscious=32, death=38),
        armor=ArmorValues(physical=3, mystical=2),
        defenses=Defenses(physical=8, mystical=10, social=7),
        recovery_tests=RecoveryTests(value=2, max=2, step=6),
        knockdown=Knockdown(step=5),
        items=[*abilities, *weapons, *spells, *magic_items],
    )


def create_test_opponent() -> Actor:
    """A plain ork brawler to attack and be attacked by."""
    return Actor(
        id="actor_ork",
        name="Ork Brawler",
        type=ActorType.NPC,
        attributes={
            "dex": AttributeScore(value=11, step=5),
            "str": AttributeScore(value=16, step=7),
            "tou": AttributeScore(value=15, step=7),
            "per": AttributeScore(value=9, step=4),
            "wil": AttributeScore(value=10, step=5),
            "cha": AttributeScore(value=8, step=4),
        },
        defenses=Defenses(physical=7, mystical=6, social=6),
        armor=ArmorValues(physical=4, mystical=1),
        items=[
            Ability(id="ability_ork_unarmed", name="Unarmed Combat", edid="unarmed-combat", attribute="dex", rank=3),
        ],
    )
