# Database models package
from shortforge.models.job import GenerationJob, Scene, JobStatus
from shortforge.models.preset import Style, Climate
from shortforge.models.character import Character, JobCharacter
from shortforge.models.credit import CreditBalance, CreditTransaction
from shortforge.models.settings import AdminSetting

__all__ = [
    "GenerationJob",
    "Scene",
    "JobStatus",
    "Style",
    "Climate",
    "Character",
    "JobCharacter",
    "CreditBalance",
    "CreditTransaction",
    "AdminSetting",
]
