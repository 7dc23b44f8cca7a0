from src.ed4e.scenarios.sample_actors import create_test_character, create_test_opponent

__all__ = ["create_test_character", "create_test_opponent"]
