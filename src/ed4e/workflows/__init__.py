from src.ed4e.workflows.errors import WorkflowInterruptError
from src.ed4e.workflows.workflow import ActorWorkflow, ItemWorkflow, Workflow, WorkflowStatus
from src.ed4e.workflows.rollable import Rollable
from src.ed4e.workflows.attribute import AttributeWorkflow
from src.ed4e.workflows.half_magic import HalfMagicWorkflow
from src.ed4e.workflows.attack import AttackWorkflow
from src.ed4e.workflows.knockdown import KnockdownWorkflow
from src.ed4e.workflows.jump_up import JumpUpWorkflow
from src.ed4e.workflows.recovery import RecoveryWorkflow
from src.ed4e.workflows.substitute import SUBSTITUTE_MODES, SubstituteWorkflow
from src.ed4e.workflows.item_history import ItemHistoryWorkflow
from src.ed4e.workflows.attune_matrix import AttuneMatrixWorkflow
from src.ed4e.workflows.attune_grimoire import AttuneGrimoireWorkflow
from src.ed4e.workflows.base_casting import BaseCastingWorkflow
from src.ed4e.workflows.matrix_casting import MatrixCastingWorkflow
from src.ed4e.workflows.grimoire_casting import GrimoireCastingWorkflow
from src.ed4e.workflows.raw_casting import RawCastingWorkflow
from src.ed4e.workflows.spellcasting import CASTING_WORKFLOWS, SpellcastingWorkflow

__all__ = [
    "WorkflowInterruptError",
    "ActorWorkflow",
    "ItemWorkflow",
    "Workflow",
    "WorkflowStatus",
    "Rollable",
    "AttributeWorkflow",
    "HalfMagicWorkflow",
    "AttackWorkflow",
    "KnockdownWorkflow",
    "JumpUpWorkflow",
    "RecoveryWorkflow",
    "SUBSTITUTE_MODES",
    "SubstituteWorkflow",
    "ItemHistoryWorkflow",
    "AttuneMatrixWorkflow",
    "AttuneGrimoireWorkflow",
    "BaseCastingWorkflow",
    "MatrixCastingWorkflow",
    "GrimoireCastingWorkflow",
    "RawCastingWorkflow",
    "CASTING_WORKFLOWS",
    "SpellcastingWorkflow",
]
