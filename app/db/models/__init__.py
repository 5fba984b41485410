from app.db.models.user import User, UserRole
from app.db.models.court import Court, CourtType
from app.db.models.case_type import CaseType, CaseCategory
from app.db.models.case import Case, CaseStatus, CaseStage, CasePriority
from app.db.models.hearing import Hearing, HearingStatus, HearingPurpose
from app.db.models.advocate import Advocate
from app.db.models.case_party import CaseParty, PartyType
from app.db.models.bookmark import CaseBookmark

# Export all models and enums
__all__ = [
    'User', 'UserRole',
    'Court', 'CourtType',
    'CaseType', 'CaseCategory',
    'Case', 'CaseStatus', 'CaseStage', 'CasePriority',
    'Hearing', 'HearingStatus', 'HearingPurpose',
    'Advocate',
    'CaseParty', 'PartyType',
    'CaseBookmark',
]
