# ============================================================
# ORACLE ANSWER EXCEPTIONS
# ============================================================

class OracleAnswerError(Exception):
    """Base exception for answers the oracle could not give"""
    pass


class JSONExtractionError(OracleAnswerError):
    """Could not extract JSON from LLM response"""
    pass


class ValidationFailedError(OracleAnswerError):
    """JSON was extracted but failed Pydantic validation"""
    pass


class UnknownChoiceError(OracleAnswerError):
    """The LLM picked something that was not offered"""
    pass
