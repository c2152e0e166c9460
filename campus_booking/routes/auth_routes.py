from fastapi import APIRouter, Depends

from campus_booking.auth.dependencies import get_current_user
from campus_booking.models.user import User
from campus_booking.routes.common import Envelope, UserSummaryResponse, envelope

router = APIRouter(tags=['auth'])


@router.get('/me', response_model=Envelope[UserSummaryResponse])
def me(current_user: User = Depends(get_current_user)):
    return envelope(UserSummaryResponse.model_validate(current_user))
