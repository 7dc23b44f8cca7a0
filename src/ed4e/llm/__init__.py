from src.ed4e.llm.client import OllamaClient
from src.ed4e.llm.oracle_prompt import OraclePrompt

__all__ = ["OllamaClient", "OraclePrompt"]
