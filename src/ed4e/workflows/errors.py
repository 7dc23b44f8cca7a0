# =============================================================================
# WORKFLOW EXCEPTIONS
# =============================================================================

class WorkflowInterruptError(Exception):
    """
    Stops a running workflow with a message for the user.

    ``Workflow.execute`` catches this error, publishes the message as a
    warning and returns ``None``. Every other error propagates.
    """
    def __init__(self, workflow, message: str | None = None):
        self.workflow = workflow
        self.message = message or f"{workflow.name} interrupted"
        super().__init__(self.message)
