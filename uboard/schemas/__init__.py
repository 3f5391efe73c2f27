from uboard.schemas.common import Envelope, EnvelopeData
from uboard.schemas.user import (
    UserCreate,
    UserResponse,
    AuthorPublic,
    Token,
    LoginRequest,
)
from uboard.schemas.post import Coords, TagRead, PostUpdate, PostRead, PostDetail, PostPreview, ReportResult
from uboard.schemas.comment import CommentCreate, CommentUpdate, CommentResponse
