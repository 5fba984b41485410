from app.schemas.user import User, UserCreate, UserRegister, UserUpdate, UserRoleUpdate, CurrentUser
from app.schemas.auth import Token, TokenPayload, AuthResponse, LoginRequest, RefreshTokenRequest, ChangePasswordRequest
from app.schemas.court import Court, CourtCreate, CourtUpdate
from app.schemas.case_type import CaseType, CaseTypeCreate, CaseTypeUpdate
from app.schemas.case import Case, CaseCreate, CaseUpdate, CaseStatusUpdate, CaseResponse, CaseList
from app.schemas.hearing import Hearing, HearingCreate, HearingUpdate, HearingStatusUpdate, HearingResponse
from app.schemas.advocate import Advocate, AdvocateCreate, AdvocateUpdate, AdvocateList
from app.schemas.case_party import CaseParty, CasePartyCreate, CasePartyUpdate
from app.schemas.bookmark import Bookmark, BookmarkCreate, BookmarkUpdate, BookmarkCheck

# Export all schemas
__all__ = [
    'User', 'UserCreate', 'UserRegister', 'UserUpdate', 'UserRoleUpdate', 'CurrentUser',
    'Token', 'TokenPayload', 'AuthResponse', 'LoginRequest', 'RefreshTokenRequest', 'ChangePasswordRequest',
    'Court', 'CourtCreate', 'CourtUpdate',
    'CaseType', 'CaseTypeCreate', 'CaseTypeUpdate',
    'Case', 'CaseCreate', 'CaseUpdate', 'CaseStatusUpdate', 'CaseResponse', 'CaseList',
    'Hearing', 'HearingCreate', 'HearingUpdate', 'HearingStatusUpdate', 'HearingResponse',
    'Advocate', 'AdvocateCreate', 'AdvocateUpdate', 'AdvocateList',
    'CaseParty', 'CasePartyCreate', 'CasePartyUpdate',
    'Bookmark', 'BookmarkCreate', 'BookmarkUpdate', 'BookmarkCheck',
]
