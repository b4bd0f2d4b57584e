import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pytz
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ConfigDict, Field

from dawak.application.session import PharmacySession
from dawak.core.config import settings
from dawak.domain.errors import EmptyCartError, InvalidCredentialsError, ValidationError
from dawak.domain.models import STATUS_LABELS, ItemDraft, LineItem, Order

router = APIRouter()
logger = logging.getLogger(__name__)
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


class LoginPayload(BaseModel):
    email: str
    password: str


class ImagePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_ref: Optional[str] = Field(None, alias="imageRef")


# ---------------------------------------------------------
# HELPERS
# ---------------------------------------------------------

def local_time(created_at_ms: int) -> datetime:
    """Order timestamp in the pharmacy's timezone."""
    utc_time = datetime.fromtimestamp(created_at_ms / 1000, tz=pytz.utc)
    return utc_time.astimezone(pytz.timezone(settings.TIMEZONE))


def order_view(order: Order) -> dict:
    view = order.to_json()
    view["statusLabel"] = STATUS_LABELS[order.status]
    view["createdAtLocal"] = local_time(order.created_at).isoformat()
    return view


def item_view(item: LineItem) -> dict:
    return item.model_dump(mode="json", by_alias=True)


def get_session(request: Request) -> PharmacySession:
    """The logged-in session, or 401."""
    session = getattr(request.app.state, "session", None)
    if session is None or not request.app.state.auth.is_active():
        raise HTTPException(status_code=401, detail="Please log in first")
    return session


# ---------------------------------------------------------
# AUTH
# ---------------------------------------------------------

@router.post("/auth/login")
async def login(payload: LoginPayload, request: Request):
    state = request.app.state
    try:
        state.auth.login(payload.email, payload.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail=str(e))

    if state.session is None:
        state.session = state.session_factory(state.store)
        state.session.start()
    return {"ok": True}


@router.post("/auth/logout")
async def logout(request: Request):
    state = request.app.state
    state.auth.logout()
    if state.session is not None:
        session, state.session = state.session, None
        await session.close()
    return {"ok": True}


# ---------------------------------------------------------
# CART
# ---------------------------------------------------------

@router.get("/cart")
async def read_cart(request: Request):
    session = get_session(request)
    return {"items": [item_view(i) for i in session.cart.items]}


@router.put("/cart/image")
async def attach_cart_image(payload: ImagePayload, request: Request):
    """Image picker hands over (or clears) the preview for the next item."""
    session = get_session(request)
    session.cart.attach_image(payload.image_ref)
    return {"imageRef": session.cart.draft.image_ref}


@router.post("/cart/items", status_code=201)
async def add_cart_item(draft: ItemDraft, request: Request):
    session = get_session(request)
    if draft.image_ref is None and session.cart.draft.image_ref:
        draft = draft.model_copy(update={"image_ref": session.cart.draft.image_ref})
    try:
        item = session.cart.add_item(draft)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"item": item_view(item), "cartSize": len(session.cart)}


@router.delete("/cart/items/{item_id}")
async def remove_cart_item(item_id: int, request: Request):
    session = get_session(request)
    removed = session.cart.remove_item(item_id)
    return {"removed": removed is not None, "cartSize": len(session.cart)}


# ---------------------------------------------------------
# ORDERS
# ---------------------------------------------------------

@router.post("/orders", status_code=201)
async def submit_order(request: Request):
    session = get_session(request)
    try:
        order = session.order_book.submit_order(session.cart)
    except EmptyCartError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {
        "order": order_view(order),
        "message": "Order Sent Successfully!",
        "warnings": session.drain_warnings(),
    }


@router.get("/orders")
async def list_orders(request: Request):
    session = get_session(request)
    return {
        "orders": [order_view(o) for o in session.orders],
        "warnings": session.drain_warnings(),
    }


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(request: Request):
    session = get_session(request)
    orders = [
        {"order": o, "label": STATUS_LABELS[o.status], "created": local_time(o.created_at)}
        for o in session.orders
    ]
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "project": settings.PROJECT_NAME,
            "cart": session.cart.items,
            "orders": orders,
            "support_phone": settings.SUPPORT_PHONE,
            "warnings": session.drain_warnings(),
        },
    )
