from fastapi import APIRouter

from app.api.deps import CurrentUser, DB
from app.schemas.auth import AuthResponse, SignInRequest, SignUpRequest, user_to_response
from app.services.auth_service import AuthService
from app.utils.envelopes import api_success

router = APIRouter(tags=["auth"])


@router.post("/auth/sign-up", response_model=dict, status_code=201)
async def sign_up(payload: SignUpRequest, db: DB):
	user = await AuthService.create_user(db, name=payload.name, email=payload.email, password=payload.password)
	token, expires_at = AuthService.generate_token(user)
	response = AuthResponse(user=user_to_response(user), token=token, expires_at=expires_at)
	return api_success(response.model_dump(mode="json"), message="User created successfully")


@router.post("/auth/sign-in", response_model=dict)
async def sign_in(payload: SignInRequest, db: DB):
	user = await AuthService.authenticate_email(db, email=payload.email, password=payload.password)
	token, expires_at = AuthService.generate_token(user)
	response = AuthResponse(user=user_to_response(user), token=token, expires_at=expires_at)
	return api_success(response.model_dump(mode="json"), message="User signed in successfully")


@router.post("/auth/sign-out", response_model=dict)
async def sign_out(current_user: CurrentUser):
	# Tokens are stateless; the client discards its copy
	return api_success({"id": str(current_user.id)}, message="User signed out successfully")
