from src.ed4e.utils.logging import setup_logging

__all__ = ["setup_logging"]
