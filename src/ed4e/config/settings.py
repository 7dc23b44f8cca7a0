from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Paths
    data_dir: Path = Path("data")
    database_path: Path = Path("data") / "ed4e.db"

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None
    enable_color: bool = True

    # Game mechanics
    minimum_difficulty: int = 2
    jump_up_base_difficulty: int = 6
    jump_up_strain_cost: int = 2
    karma_default_step: int = 4
    devotion_default_step: int = 3

    # Ability identifiers (edid) used to look up items on an actor
    edid_unarmed_combat: str = "unarmed-combat"
    edid_melee_weapons: str = "melee-weapons"
    edid_missile_weapons: str = "missile-weapons"
    edid_throwing_weapons: str = "throwing-weapons"
    edid_spellcasting: str = "spellcasting"
    edid_patterncraft: str = "patterncraft"
    edid_thread_weaving: str = "thread-weaving"
    edid_item_history: str = "item-history"

    # LLM Settings
    ollama_host: str = "http://localhost:11434"
    oracle_model: str = "mistral:7b"
    oracle_timeout: float = 30.0

    model_config = SettingsConfigDict(env_file=".env", env_prefix="ED4E_")


settings = Settings()
