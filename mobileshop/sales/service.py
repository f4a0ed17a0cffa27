import time
from datetime import date, datetime
from datetime import time as dtime
from typing import Callable, Iterable, List, NamedTuple, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from mobileshop.config import settings
from mobileshop.database import atomic
from mobileshop.errors import ConflictError, NotFoundError, ValidationError
from mobileshop.stock.inventory import service as inventory_service
from mobileshop.stock.products.models import Product
from mobileshop.users.schemas import Identity

from . import models, schemas


class SaleResult(NamedTuple):
    sale: models.Sale
    warnings: List[str]


class SaleTotals(NamedTuple):
    subtotal: float
    gross_profit: float
    discount_value: float
    net_total: float
    total_profit: float


def generate_invoice_number() -> str:
    """INV + creation time in microseconds; ordered by when the sale was rung up."""
    return f"INV{time.time_ns() // 1000}"


def discount_value(subtotal: float, discount_amount: float, discount_type: Optional[str]) -> float:
    if not discount_amount:
        return 0.0
    if discount_type == "percentage":
        return subtotal * discount_amount / 100
    # flat, or no type given
    return float(discount_amount)


def compute_sale_totals(
    items: Iterable[schemas.SaleLineItem],
    discount_amount: float = 0,
    discount_type: Optional[str] = None,
) -> SaleTotals:
    """
    Header totals for a cart.
    The discount comes straight off the profit, it is not spread over lines.
    """
    subtotal = 0.0
    gross_profit = 0.0
    for item in items:
        subtotal += item.line_total
        gross_profit += item.profit

    discount = discount_value(subtotal, discount_amount, discount_type)

    return SaleTotals(
        subtotal=subtotal,
        gross_profit=gross_profit,
        discount_value=discount,
        net_total=subtotal - discount,
        total_profit=gross_profit - discount,
    )


def validate_sale(sale_data: schemas.SaleRecord):
    if not sale_data.items:
        raise ValidationError("Sale must contain at least one item")

    for position, item in enumerate(sale_data.items, start=1):
        if item.quantity <= 0:
            raise ValidationError(f"Item {position}: quantity must be greater than zero")
        if item.unit_price < 0:
            raise ValidationError(f"Item {position}: unit price cannot be negative")
        if item.purchase_price < 0:
            raise ValidationError(f"Item {position}: purchase price cannot be negative")

    if sale_data.discount_amount < 0:
        raise ValidationError("Discount cannot be negative")

    if sale_data.discount_type == "percentage" and sale_data.discount_amount > 100:
        raise ValidationError("Percentage discount cannot exceed 100")


# ============================================================
# PRICE A CART FROM CURRENT PRODUCT STATE
# ============================================================

def price_line_items(db: Session, items: List[schemas.SaleItemIn]) -> List[schemas.SaleLineItem]:
    """
    Fill the snapshot fields the register left out from the product as it is
    now. Values the register did send (price overrides, promotions) win.
    """
    priced = []

    for item in items:
        product = db.query(Product).filter(Product.id == item.product_id).first()
        if not product:
            raise NotFoundError(f"Product {item.product_id} not found")

        unit_price = item.unit_price if item.unit_price is not None else product.selling_price
        purchase_price = (
            item.purchase_price if item.purchase_price is not None else product.purchase_price
        )

        priced.append(
            schemas.SaleLineItem(
                product_id=product.id,
                product_name=item.product_name or product.name,
                quantity=item.quantity,
                unit_price=unit_price,
                purchase_price=purchase_price,
                line_total=(
                    item.line_total if item.line_total is not None
                    else unit_price * item.quantity
                ),
                profit=(
                    item.profit if item.profit is not None
                    else (unit_price - purchase_price) * item.quantity
                ),
                serial_imei=item.serial_imei or product.serial_number,
                warranty_days=(
                    item.warranty_days if item.warranty_days is not None
                    else product.warranty_days
                ),
                remarks=item.remarks or "",
            )
        )

    return priced


# ============================================================
# CREATE SALE (header + items + stock, one transaction)
# ============================================================

def create_sale(
    db: Session,
    identity: Identity,
    sale_data: schemas.SaleRecord,
    invoice_number_factory: Callable[[], str] = generate_invoice_number,
    allow_oversell: Optional[bool] = None,
):
    """
    Record a sale with all its items in one transaction.

    Line totals and profits are taken as given. Every item's quantity is
    taken off the product's stock; a short stock is reported in the
    returned warnings unless overselling is switched off.
    """
    validate_sale(sale_data)

    if allow_oversell is None:
        allow_oversell = settings.ALLOW_OVERSELL

    totals = compute_sale_totals(
        sale_data.items, sale_data.discount_amount, sale_data.discount_type
    )
    warnings = []

    with atomic(db):
        # 1. Sale header
        sale = models.Sale(
            invoice_number=invoice_number_factory(),
            customer_name=sale_data.customer_name,
            customer_phone=sale_data.customer_phone,
            customer_cnic=sale_data.customer_cnic,
            payment_type=sale_data.payment_type,
            subtotal=totals.subtotal,
            discount_amount=sale_data.discount_amount,
            discount_type=sale_data.discount_type,
            net_total=totals.net_total,
            total_profit=totals.total_profit,
            created_by=identity.id,
        )
        db.add(sale)

        try:
            db.flush()  # get sale.id without committing
        except IntegrityError as exc:
            if "invoice_number" in str(exc.orig):
                raise ConflictError(f"Invoice number {sale.invoice_number} already exists") from exc
            raise

        # 2. Items and stock
        for item in sale_data.items:
            db.add(
                models.SaleItem(
                    sale_id=sale.id,
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    returned_quantity=0,
                    unit_price=item.unit_price,
                    purchase_price=item.purchase_price,
                    line_total=item.line_total,
                    profit=item.profit,
                    serial_imei=item.serial_imei,
                    warranty_days=item.warranty_days or 0,
                    remarks=item.remarks or "",
                )
            )

            stock = inventory_service.get_stock(db, item.product_id)
            if stock is None:
                raise NotFoundError(f"Product {item.product_id} not found")

            if stock < item.quantity:
                message = (
                    f"Insufficient stock for {item.product_name}. "
                    f"Available: {stock}, Sold: {item.quantity}"
                )
                if not allow_oversell:
                    raise ValidationError(message)
                warnings.append(message)
                logger.warning(message)

            inventory_service.adjust_quantity(db, item.product_id, -item.quantity)

    db.refresh(sale)
    logger.info(
        f"Sale {sale.invoice_number} recorded by user {identity.id}: "
        f"{len(sale_data.items)} items, net {sale.net_total}, profit {sale.total_profit}"
    )

    return SaleResult(sale, warnings)


# ============================================================
# READ SIDE
# ============================================================

def get_sale(db: Session, sale_id: int):
    sale = (
        db.query(models.Sale)
        .options(joinedload(models.Sale.items))
        .filter(models.Sale.id == sale_id)
        .first()
    )

    if not sale:
        raise NotFoundError("Sale not found")

    return sale


def get_sale_by_invoice_number(db: Session, invoice_number: str):
    sale = (
        db.query(models.Sale)
        .options(joinedload(models.Sale.items))
        .filter(models.Sale.invoice_number == invoice_number)
        .first()
    )

    if not sale:
        raise NotFoundError("Sale not found")

    return sale


def list_sales(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    on_date: Optional[date] = None,
    phone: Optional[str] = None,
    invoice: Optional[str] = None,
    customer: Optional[str] = None,
    serial: Optional[str] = None,
    skip: int = 0,
    limit: Optional[int] = None,
):
    query = db.query(models.Sale).options(joinedload(models.Sale.items))

    if start_date:
        query = query.filter(models.Sale.sale_date >= datetime.combine(start_date, dtime.min))
    if end_date:
        query = query.filter(models.Sale.sale_date <= datetime.combine(end_date, dtime.max))
    if on_date:
        query = query.filter(
            models.Sale.sale_date >= datetime.combine(on_date, dtime.min),
            models.Sale.sale_date <= datetime.combine(on_date, dtime.max),
        )

    if phone:
        query = query.filter(models.Sale.customer_phone.ilike(f"%{phone.strip()}%"))
    if invoice:
        query = query.filter(models.Sale.invoice_number.ilike(f"%{invoice.strip()}%"))
    if customer:
        query = query.filter(models.Sale.customer_name.ilike(f"%{customer.strip()}%"))
    if serial:
        query = query.filter(
            models.Sale.items.any(models.SaleItem.serial_imei.ilike(f"%{serial.strip()}%"))
        )

    query = query.order_by(models.Sale.sale_date.desc(), models.Sale.id.desc()).offset(skip)
    if limit:
        query = query.limit(limit)

    sales = query.all()

    results = []
    for sale in sales:
        row = schemas.SaleListItem.model_validate(sale)
        row.serials = ",".join(i.serial_imei for i in sale.items if i.serial_imei) or None
        results.append(row)

    return results


def get_returnable_items(db: Session, sale_id: int):
    sale = get_sale(db, sale_id)

    return [
        {
            "sale_item_id": item.id,
            "product_id": item.product_id,
            "product_name": item.product_name,
            "quantity": item.quantity,
            "returned_quantity": item.returned_quantity,
            "returnable_quantity": item.returnable_quantity,
            "unit_price": item.unit_price,
        }
        for item in sale.items
    ]
