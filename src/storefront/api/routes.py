"""FastAPI routes for the storefront: catalogue, cart, checkout and order confirmation.

State-changing requests answer with a 303 redirect to the page that shows
the outcome (post/redirect/get); the outcome message rides along as a flash
message on the shopper session and is shown exactly once.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.api.dependencies import current_session, verified_session
from storefront.api.schemas import (
    AddToCartRequest,
    ApplyPromoRequest,
    CartItemSchema,
    CartResponse,
    CatalogueResponse,
    CheckoutRequest,
    CheckoutResponse,
    FlashSchema,
    OrderConfirmationResponse,
    OrderItemSchema,
    ProductSchema,
    UpdateCartQuantityRequest,
)
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from storefront.cart.promotions import INVALID_PROMO_MESSAGE, ApplyPromoCode
from storefront.cart.retrieval import get_cart
from storefront.catalogue.listing import ProductFilter, browse_catalogue, cart_count
from storefront.checkout.placement import place_order
from storefront.checkout.view import EMPTY_CART_MESSAGE, get_checkout_view
from storefront.config import get_settings
from storefront.order.claim import ClaimConfirmation
from storefront.session.management import ConsumeFlashMessage, PostFlashMessage
from storefront.session.session import FlashLevel

ITEM_ADDED_MESSAGE = "Item added to cart!"


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


def _flash(session, level: FlashLevel, message: str) -> None:
    command = PostFlashMessage(session_id=str(session.id), level=level.value, message=message)
    current_domain.process(command, asynchronous=False)


def _take_flash(session) -> FlashSchema | None:
    flash = current_domain.process(ConsumeFlashMessage(session_id=str(session.id)), asynchronous=False)
    return FlashSchema(**flash) if flash else None


def _cart_items(cart) -> list[CartItemSchema]:
    return [
        CartItemSchema(
            cart_item_id=item.cart_item_id,
            product_id=item.product_id,
            product_name=item.product_name,
            image_url=item.image_url,
            size=item.size or "",
            color=item.color or "",
            unit_price=item.unit_price,
            quantity=item.quantity,
            is_in_stock=item.is_in_stock,
            line_total=item.line_total,
        )
        for item in cart.items
    ]


def _checkout_response(session, view) -> CheckoutResponse:
    cart = view.cart
    return CheckoutResponse(
        items=_cart_items(cart),
        subtotal=cart.subtotal,
        shipping_fee=cart.shipping_fee,
        discount=cart.discount or 0.0,
        total=cart.total,
        form={key: str(value) for key, value in view.form.items()},
        errors=view.errors,
        csrf_token=session.csrf_token,
        flash=_take_flash(session),
        cart_count=cart.item_count,
    )


router = APIRouter(tags=["storefront"])


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
@router.get("/", response_model=CatalogueResponse)
async def index(
    categories: list[str] = Query(default=[]),
    brands: list[str] = Query(default=[]),
    sizes: list[str] = Query(default=[]),
    max_price: float | None = Query(default=None, ge=0),
    sort_by: str | None = None,
    session=Depends(current_session),
) -> CatalogueResponse:
    filters = ProductFilter(
        categories=categories,
        brands=brands,
        sizes=sizes,
        max_price=get_settings().default_max_price if max_price is None else max_price,
        sort_by=sort_by,
    )
    browse = browse_catalogue(filters, member_id=session.member_id)

    return CatalogueResponse(
        title=browse.title,
        products=[
            ProductSchema(
                product_id=product.product_id,
                name=product.name,
                image_url=product.image_url,
                category=product.category,
                brand=product.brand,
                size=product.size,
                price=product.price,
                original_price=product.original_price,
                discount_percent=product.discount_percent,
                rating=product.rating or 0.0,
                review_count=product.review_count or 0,
                is_in_stock=product.is_in_stock,
                is_new=product.is_new,
            )
            for product in browse.products
        ],
        categories=list(browse.categories),
        brand_counts=browse.brand_counts,
        selected_categories=categories,
        selected_brands=brands,
        selected_sizes=sizes,
        max_price=filters.max_price,
        sort_by=filters.effective_sort,
        csrf_token=session.csrf_token,
        flash=_take_flash(session),
        cart_count=browse.cart_count,
    )


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
@router.get("/cart", response_model=CartResponse)
async def view_cart(session=Depends(current_session)) -> CartResponse:
    cart = get_cart(session)
    return CartResponse(
        items=_cart_items(cart),
        subtotal=cart.subtotal,
        shipping_fee=cart.shipping_fee,
        discount=cart.discount or 0.0,
        total=cart.total,
        applied_promo_code=session.promo_code,
        estimated_delivery=cart.estimated_delivery if not cart.is_empty else None,
        csrf_token=session.csrf_token,
        flash=_take_flash(session),
        cart_count=cart.item_count,
    )


@router.post("/cart/items")
async def add_to_cart(body: AddToCartRequest, session=Depends(verified_session)):
    command = AddToCart(
        member_id=session.member_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    _flash(session, FlashLevel.SUCCESS, ITEM_ADDED_MESSAGE)
    return _redirect("/")


@router.post("/cart/items/{cart_item_id}/remove")
async def remove_from_cart(cart_item_id: int, session=Depends(verified_session)):
    current_domain.process(RemoveFromCart(cart_item_id=cart_item_id), asynchronous=False)
    return _redirect("/cart")


@router.post("/cart/items/{cart_item_id}/quantity")
async def update_cart_quantity(
    cart_item_id: int,
    body: UpdateCartQuantityRequest,
    session=Depends(verified_session),
):
    command = UpdateCartQuantity(
        member_id=session.member_id,
        cart_item_id=cart_item_id,
        direction=body.action,
    )
    current_domain.process(command, asynchronous=False)
    return _redirect("/cart")


@router.post("/cart/promo")
async def apply_promo(body: ApplyPromoRequest, session=Depends(verified_session)):
    try:
        amount = current_domain.process(
            ApplyPromoCode(session_id=str(session.id), promo_code=body.promo_code),
            asynchronous=False,
        )
    except ValidationError:
        _flash(session, FlashLevel.ERROR, INVALID_PROMO_MESSAGE)
    else:
        _flash(session, FlashLevel.SUCCESS, f"Promo code applied! You saved ₱{amount:,.0f}.")
    return _redirect("/cart")


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
@router.get("/checkout", response_model=CheckoutResponse)
async def checkout(session=Depends(current_session)):
    view = get_checkout_view(session)
    if view.empty_cart:
        _flash(session, FlashLevel.ERROR, EMPTY_CART_MESSAGE)
        return _redirect("/cart")
    return _checkout_response(session, view)


@router.post("/checkout")
async def submit_checkout(body: CheckoutRequest, session=Depends(verified_session)):
    outcome = place_order(str(session.id), body.model_dump())
    if outcome.accepted:
        return _redirect(f"/order-confirmation?ticket={outcome.ticket_id}")

    if outcome.view.empty_cart:
        _flash(session, FlashLevel.ERROR, EMPTY_CART_MESSAGE)
        return _redirect("/cart")

    response = _checkout_response(session, outcome.view)
    return JSONResponse(status_code=422, content=jsonable_encoder(response))


# ---------------------------------------------------------------------------
# Order confirmation
# ---------------------------------------------------------------------------
@router.get("/order-confirmation", response_model=OrderConfirmationResponse)
async def order_confirmation(ticket: str | None = None, session=Depends(current_session)):
    if not ticket:
        return _redirect("/")

    try:
        confirmation = current_domain.process(
            ClaimConfirmation(ticket_id=ticket, session_id=str(session.id)),
            asynchronous=False,
        )
    except ValidationError:
        confirmation = None
    if confirmation is None:
        return _redirect("/")

    return OrderConfirmationResponse(
        order_id=confirmation.order_id,
        status=confirmation.status,
        full_name=confirmation.full_name,
        email=confirmation.email,
        phone=confirmation.phone,
        address=confirmation.address,
        city=confirmation.city,
        postal_code=confirmation.postal_code,
        delivery_option=confirmation.delivery_option,
        estimated_delivery=confirmation.estimated_delivery,
        items=[
            OrderItemSchema(
                product_id=item.product_id,
                product_name=item.product_name,
                image_url=item.image_url,
                size=item.size or "",
                color=item.color or "",
                unit_price=item.unit_price,
                quantity=item.quantity,
            )
            for item in confirmation.items
        ],
        subtotal=confirmation.subtotal,
        shipping_fee=confirmation.shipping_fee,
        discount=confirmation.discount or 0.0,
        total=confirmation.total,
        csrf_token=session.csrf_token,
        cart_count=cart_count(session.member_id),
    )


@router.get("/orders/{order_id}")
async def order_detail(order_id: str):
    # Order history is not served by this app yet; keep the URL alive.
    return _redirect("/")
