from datetime import date, datetime, time
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

from mobileshop.database import atomic
from mobileshop.errors import ConflictError, NotFoundError, ValidationError
from mobileshop.sales.models import Sale, SaleItem
from mobileshop.stock.inventory import service as inventory_service
from mobileshop.stock.products.models import Product
from mobileshop.users.schemas import Identity

from . import models, schemas


def return_amounts(item: SaleItem, quantity: int):
    """
    Refund and profit reversal for ``quantity`` units of a sold line.
    The reversal is the line's own per-unit profit, not today's margin.
    """
    return_amount = item.unit_price * quantity
    return_profit = (item.profit / item.quantity) * quantity
    return return_amount, return_profit


# ============================================================
# PROCESS A RETURN (one transaction)
# ============================================================

def create_return(db: Session, identity: Identity, return_data: schemas.ReturnCreate):
    """
    Take back part or all of a sold line.

    Writes the Return row, bumps the line's returned quantity, puts the
    units back on the shelf and lowers the sale's net total and profit.
    All four land together or not at all.
    """
    quantity = return_data.quantity
    if quantity <= 0:
        raise ValidationError("Return quantity must be greater than zero")

    with atomic(db):
        item = (
            db.query(SaleItem)
            .filter(SaleItem.id == return_data.sale_item_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not item:
            raise NotFoundError("Sale item not found")

        if item.sale_id != return_data.sale_id:
            raise ValidationError("Sale item does not belong to this sale")
        if item.product_id != return_data.product_id:
            raise ValidationError("Product does not match the sale item")

        # Balance from the row as it is now, never from an earlier read
        available = item.quantity - (item.returned_quantity or 0)
        if quantity > available:
            logger.warning(
                f"Return rejected for sale item {item.id}: "
                f"requested {quantity}, available {available}"
            )
            raise ValidationError("Quantity exceeds available items for return")

        return_amount, return_profit = return_amounts(item, quantity)

        sale_return = models.Return(
            sale_id=item.sale_id,
            sale_item_id=item.id,
            product_id=item.product_id,
            quantity=quantity,
            return_amount=return_amount,
            return_profit=return_profit,
            reason=return_data.reason,
            created_by=identity.id,
        )
        db.add(sale_return)

        # Re-checks the ceiling in the same statement that moves it
        claimed = (
            db.query(SaleItem)
            .filter(
                SaleItem.id == item.id,
                SaleItem.quantity - SaleItem.returned_quantity >= quantity,
            )
            .update({SaleItem.returned_quantity: SaleItem.returned_quantity + quantity})
        )
        if claimed != 1:
            raise ConflictError("Sale item changed while processing the return, try again")

        inventory_service.adjust_quantity(db, item.product_id, quantity)

        updated = (
            db.query(Sale)
            .filter(Sale.id == item.sale_id)
            .update({
                Sale.net_total: Sale.net_total - return_amount,
                Sale.total_profit: Sale.total_profit - return_profit,
            })
        )
        if updated != 1:
            raise NotFoundError("Sale not found")

    db.refresh(sale_return)
    logger.info(
        f"Return {sale_return.id} on sale {sale_return.sale_id} by user {identity.id}: "
        f"{quantity} x product {sale_return.product_id}, refund {return_amount}"
    )
    return sale_return


# ============================================================
# READ SIDE
# ============================================================

def list_returns(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    invoice: Optional[str] = None,
    phone: Optional[str] = None,
    customer: Optional[str] = None,
):
    query = (
        db.query(
            models.Return,
            Product.name.label("product_name"),
            Sale.invoice_number,
            Sale.customer_name,
            Sale.customer_phone,
        )
        .join(Product, Product.id == models.Return.product_id)
        .join(Sale, Sale.id == models.Return.sale_id)
    )

    if start_date:
        query = query.filter(models.Return.return_date >= datetime.combine(start_date, time.min))
    if end_date:
        query = query.filter(models.Return.return_date <= datetime.combine(end_date, time.max))
    if invoice:
        query = query.filter(Sale.invoice_number.ilike(f"%{invoice.strip()}%"))
    if phone:
        query = query.filter(Sale.customer_phone.ilike(f"%{phone.strip()}%"))
    if customer:
        query = query.filter(Sale.customer_name.ilike(f"%{customer.strip()}%"))

    rows = query.order_by(models.Return.return_date.desc(), models.Return.id.desc()).all()

    results = []
    for sale_return, product_name, invoice_number, customer_name, customer_phone in rows:
        out = schemas.ReturnOut.model_validate(sale_return)
        out.product_name = product_name
        out.invoice_number = invoice_number
        out.customer_name = customer_name
        out.customer_phone = customer_phone
        results.append(out)

    return results
