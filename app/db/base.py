from app.core.database import Base
from app.db.models.user import User
from app.db.models.court import Court
from app.db.models.case_type import CaseType
from app.db.models.case import Case
from app.db.models.hearing import Hearing
from app.db.models.advocate import Advocate
from app.db.models.case_party import CaseParty
from app.db.models.bookmark import CaseBookmark

# All models are imported here for SQLAlchemy to discover them
