"""
Order routes: creation and the polling endpoint used by the totem.
"""
from fastapi import APIRouter, Depends, Path

from api.dependencies import get_order_service
from application.dtos.payments import CreateOrderRequest
from application.services.order_service import OrderApplicationService
from core.response import success_response


router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("", summary="Create order")
async def create_order(
    payload: CreateOrderRequest,
    service: OrderApplicationService = Depends(get_order_service),
):
    order_id = await service.create_order(payload)
    return success_response(data={"order_id": order_id}, message="Order created")


@router.get("/{order_id}", summary="Get order with its latest payment attempt")
async def get_order(
    order_id: int = Path(..., gt=0),
    service: OrderApplicationService = Depends(get_order_service),
):
    detail = await service.get_order(order_id)
    return success_response(data=detail.model_dump(mode="json"))
