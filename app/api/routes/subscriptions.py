"""Subscription management routes."""

from typing import Optional

from fastapi import APIRouter, Query

from app.api.deps import CurrentUser, DB, Dispatcher
from app.database.subscription_repo import parse_uuid
from app.models.subscription_enums import SubscriptionCategory, SubscriptionStatus
from app.schemas.subscriptions import SubscriptionCreate, SubscriptionUpdate, subscription_to_response
from app.services.subscription_service import SubscriptionService
from app.utils.envelopes import api_list, api_success
from app.utils.exceptions import NotFoundException

router = APIRouter(tags=["subscriptions"])


@router.post("/subscriptions", response_model=dict, status_code=201)
async def create_subscription(
    payload: SubscriptionCreate,
    current_user: CurrentUser,
    db: DB,
    dispatcher: Dispatcher,
):
    """Create a subscription and start its renewal reminder workflow."""
    subscription, run_id = await SubscriptionService.create_subscription(db, current_user, payload, dispatcher)
    return api_success({"subscription": subscription_to_response(subscription), "workflowRunId": run_id})


@router.get("/subscriptions", response_model=dict)
async def list_subscriptions(
    current_user: CurrentUser,
    db: DB,
    status: Optional[SubscriptionStatus] = None,
    category: Optional[SubscriptionCategory] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    """List own subscriptions; admins see all."""
    items, total = await SubscriptionService.list_subscriptions(
        db, current_user, status=status, category=category, page=page, limit=limit
    )
    return api_list([subscription_to_response(item) for item in items], total=total, page=page, limit=limit)


@router.get("/subscriptions/upcoming-renewals", response_model=dict)
async def upcoming_renewals(current_user: CurrentUser, db: DB):
    """Active subscriptions renewing within the upcoming-renewal window."""
    items = await SubscriptionService.upcoming_renewals(db, current_user)
    return api_list([subscription_to_response(item) for item in items])


@router.get("/subscriptions/user/{user_id}", response_model=dict)
async def list_user_subscriptions(
    user_id: str,
    current_user: CurrentUser,
    db: DB,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    owner_id = parse_uuid(user_id)
    if owner_id is None:
        raise NotFoundException("User not found", details={"user_id": user_id})
    items, total = await SubscriptionService.list_subscriptions(
        db, current_user, owner_id=owner_id, page=page, limit=limit
    )
    return api_list([subscription_to_response(item) for item in items], total=total, page=page, limit=limit)


@router.get("/subscriptions/{subscription_id}", response_model=dict)
async def get_subscription(subscription_id: str, current_user: CurrentUser, db: DB):
    subscription = await SubscriptionService.get_subscription(db, subscription_id, current_user)
    return api_success(subscription_to_response(subscription))


@router.put("/subscriptions/{subscription_id}", response_model=dict)
async def update_subscription(
    subscription_id: str,
    payload: SubscriptionUpdate,
    current_user: CurrentUser,
    db: DB,
    dispatcher: Dispatcher,
):
    """Update a subscription. A moved renewal date starts a new reminder run."""
    subscription, run_id = await SubscriptionService.update_subscription(
        db, subscription_id, current_user, payload, dispatcher
    )
    return api_success({"subscription": subscription_to_response(subscription), "workflowRunId": run_id})


@router.put("/subscriptions/{subscription_id}/cancel", response_model=dict)
async def cancel_subscription(
    subscription_id: str,
    current_user: CurrentUser,
    db: DB,
    dispatcher: Dispatcher,
):
    subscription, live_run_ids = await SubscriptionService.cancel_subscription(
        db, subscription_id, current_user, dispatcher
    )
    return api_success(
        {"subscription": subscription_to_response(subscription), "liveRunIds": live_run_ids},
        message="Subscription cancelled successfully",
    )


@router.delete("/subscriptions/{subscription_id}", response_model=dict)
async def delete_subscription(
    subscription_id: str,
    current_user: CurrentUser,
    db: DB,
    dispatcher: Dispatcher,
):
    await SubscriptionService.delete_subscription(db, subscription_id, current_user, dispatcher)
    return api_success({"id": subscription_id}, message="Subscription deleted successfully")
