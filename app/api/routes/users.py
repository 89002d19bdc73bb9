from fastapi import APIRouter, Query
from sqlalchemy import func, select

from app.api.deps import AdminUser, CurrentUser, DB, Dispatcher
from app.core.security import hash_password
from app.database.subscription_repo import parse_uuid
from app.models.models import User
from app.schemas.auth import ChangePasswordRequest, UserAdminUpdateRequest, UserUpdateRequest, user_to_response
from app.services.auth_service import AuthService
from app.utils.envelopes import api_list, api_success
from app.utils.exceptions import ForbiddenException, NotFoundException

router = APIRouter(tags=["users"])


@router.get("/users/me", response_model=dict)
async def get_current_user_endpoint(current_user: CurrentUser):
	return api_success(user_to_response(current_user).model_dump(mode="json"))


@router.patch("/users/me", response_model=dict)
async def update_current_user_endpoint(
	payload: UserUpdateRequest,
	current_user: CurrentUser,
	db: DB,
):
	updated = False
	if payload.name is not None and payload.name != current_user.name:
		current_user.name = payload.name.strip()
		updated = True
	if payload.password is not None:
		current_user.password_hash = hash_password(payload.password)
		updated = True

	if updated:
		await db.commit()
		await db.refresh(current_user)

	return api_success(user_to_response(current_user).model_dump(mode="json"))


@router.get("/users", response_model=dict)
async def list_users(
	admin: AdminUser,
	db: DB,
	page: int = Query(1, ge=1),
	limit: int = Query(20, ge=1, le=100),
):
	total = await db.scalar(select(func.count()).select_from(User))
	result = await db.execute(
		select(User).order_by(User.created_date.desc()).offset((page - 1) * limit).limit(limit)
	)
	users = [user_to_response(user).model_dump(mode="json") for user in result.scalars().all()]
	return api_list(users, total=int(total or 0), page=page, limit=limit)


@router.get("/users/{user_id}", response_model=dict)
async def get_user(user_id: str, current_user: CurrentUser, db: DB):
	key = parse_uuid(user_id)
	if key is None:
		raise NotFoundException("User not found", details={"user_id": user_id})
	if key != current_user.id and not current_user.is_admin:
		raise ForbiddenException("You can only view your own account")

	result = await db.execute(select(User).where(User.id == key))
	user = result.scalar_one_or_none()
	if user is None:
		raise NotFoundException("User not found", details={"user_id": user_id})
	return api_success(user_to_response(user).model_dump(mode="json"))


@router.put("/users/password", response_model=dict)
async def change_password(payload: ChangePasswordRequest, current_user: CurrentUser, db: DB):
	await AuthService.change_password(db, current_user, payload.current_password, payload.new_password)
	return api_success({"id": str(current_user.id)}, message="Password updated successfully")


@router.put("/users/{user_id}", response_model=dict)
async def update_user(user_id: str, payload: UserAdminUpdateRequest, current_user: CurrentUser, db: DB):
	key = parse_uuid(user_id)
	if key is None:
		raise NotFoundException("User not found", details={"user_id": user_id})

	user = await AuthService.update_user(
		db,
		current_user,
		key,
		name=payload.name,
		email=payload.email,
		role=payload.role,
		is_active=payload.is_active,
	)
	return api_success(user_to_response(user).model_dump(mode="json"))


@router.delete("/users/{user_id}", response_model=dict)
async def delete_user(user_id: str, admin: AdminUser, db: DB, dispatcher: Dispatcher):
	key = parse_uuid(user_id)
	if key is None:
		raise NotFoundException("User not found", details={"user_id": user_id})

	subscription_ids = await AuthService.delete_user(db, key)
	# Live runs find nothing on their next wake and end as not found
	for subscription_id in subscription_ids:
		await dispatcher.on_subscription_cancelled(str(subscription_id))
	return api_success(
		{"id": user_id, "deletedSubscriptionIds": [str(s) for s in subscription_ids]},
		message="User deleted successfully",
	)
