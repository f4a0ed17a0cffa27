from sqlalchemy.orm import Session

from mobileshop.errors import NotFoundError
from mobileshop.stock.category.models import Category
from mobileshop.stock.products.models import Product


# --------------------------
# Read-only: list inventory
# --------------------------
def list_inventory(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    product_id: int | None = None,
    product_name: str | None = None,
):
    query = (
        db.query(
            Product.id.label("product_id"),
            Product.name.label("product_name"),
            Category.name.label("category_name"),
            Product.quantity,
            Product.purchase_price,
        )
        .join(Category, Category.id == Product.category_id)
        .order_by(Product.id.asc())
    )

    if product_id is not None:
        query = query.filter(Product.id == product_id)

    if product_name:
        query = query.filter(Product.name.ilike(f"%{product_name}%"))

    result = []
    grand_total = 0.0

    for item in query.offset(skip).limit(limit).all():
        # Oversold items carry no value
        inventory_value = max(item.quantity, 0) * (item.purchase_price or 0)
        grand_total += inventory_value

        result.append({
            "product_id": item.product_id,
            "product_name": item.product_name,
            "category_name": item.category_name,
            "quantity": item.quantity,
            "purchase_price": item.purchase_price,
            "inventory_value": inventory_value,
        })

    return {
        "inventory": result,
        "grand_total": grand_total
    }


def get_stock(db: Session, product_id: int) -> int | None:
    """Current on-hand quantity, None when the product does not exist."""
    return (
        db.query(Product.quantity)
        .filter(Product.id == product_id)
        .scalar()
    )


# --------------------------
# Internal: move stock (sales / returns)
# --------------------------
def adjust_quantity(db: Session, product_id: int, delta: int) -> int:
    """
    Add ``delta`` (negative for a sale, positive for a return) to the
    product's quantity as one SQL-side increment. Runs inside the caller's
    transaction and never commits. Returns the new quantity.
    """
    updated = (
        db.query(Product)
        .filter(Product.id == product_id)
        .update({Product.quantity: Product.quantity + delta})
    )

    if updated == 0:
        raise NotFoundError(f"Product {product_id} not found")

    return get_stock(db, product_id)
