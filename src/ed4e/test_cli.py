"""Tests for the console entry point, settings and logging setup."""

import logging

from src.ed4e.__main__ import build_workflow, print_status
from src.ed4e.config.settings import Settings
from src.ed4e.utils.logging import setup_logging
from src.ed4e.workflows import AttackWorkflow, AttributeWorkflow, RecoveryWorkflow, SpellcastingWorkflow


def test_build_workflow(actor, opponent, context):
    assert isinstance(build_workflow("attribute", ["per"], actor, opponent, context), AttributeWorkflow)
    assert isinstance(build_workflow("attack", [], actor, opponent, context), AttackWorkflow)
    assert isinstance(build_workflow("recover", ["fullRest"], actor, opponent, context), RecoveryWorkflow)
    assert isinstance(build_workflow("cast", ["spell_fire_ball"], actor, opponent, context), SpellcastingWorkflow)
    assert build_workflow("dance", [], actor, opponent, context) is None


def test_cast_without_spell_lists_spells(actor, opponent, context, capsys):
    assert build_workflow("cast", [], actor, opponent, context) is None
    assert "spell_fire_ball" in capsys.readouterr().out


def test_print_status(actor, capsys):
    print_status(actor)
    out = capsys.readouterr().out
    assert "Aelin Vey" in out
    assert "spell_earth_darts" in out


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("ED4E_JUMP_UP_BASE_DIFFICULTY", "8")
    monkeypatch.setenv("ED4E_LOG_LEVEL", "DEBUG")
    settings = Settings(_env_file=None)
    assert settings.jump_up_base_difficulty == 8
    assert settings.log_level == "DEBUG"
    assert settings.minimum_difficulty == 2


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "ed4e.log"
    logger = setup_logging(level="DEBUG", log_file=log_file, enable_color=False)
    try:
        logging.getLogger("src.ed4e.workflows.workflow").debug("step 0")
        for handler in logger.handlers:
            handler.flush()
        assert "step 0" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
