from src.ed4e.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
