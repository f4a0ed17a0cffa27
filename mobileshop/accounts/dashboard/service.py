from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from mobileshop.accounts.expenses import models as expense_models
from mobileshop.config import settings
from mobileshop.sales import models as sales_models
from mobileshop.stock.products import models as product_models


def dashboard_stats(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    """
    Totals over the period, inclusive of both days.
    Sales figures are net of discounts and of any returns processed so far.
    """
    sales_query = db.query(
        func.count(sales_models.Sale.id).label("count"),
        func.sum(sales_models.Sale.net_total).label("total"),
        func.sum(sales_models.Sale.total_profit).label("profit"),
    )
    expense_query = db.query(func.sum(expense_models.Expense.amount).label("total"))

    if start_date:
        sales_query = sales_query.filter(
            sales_models.Sale.sale_date >= datetime.combine(start_date, time.min)
        )
        expense_query = expense_query.filter(expense_models.Expense.expense_date >= start_date)

    if end_date:
        sales_query = sales_query.filter(
            sales_models.Sale.sale_date <= datetime.combine(end_date, time.max)
        )
        expense_query = expense_query.filter(expense_models.Expense.expense_date <= end_date)

    sales_data = sales_query.one()
    total_expenses = float(expense_query.scalar() or 0)

    total_profit = float(sales_data.profit or 0)

    return {
        "transactions": sales_data.count or 0,
        "total_sales": float(sales_data.total or 0),
        "total_profit": total_profit,
        "total_expenses": total_expenses,
        "net_profit": total_profit - total_expenses,
    }


def top_products(db: Session, limit: Optional[int] = None):
    total_sold = func.sum(sales_models.SaleItem.quantity).label("total_sold")

    rows = (
        db.query(
            sales_models.SaleItem.product_name,
            total_sold,
            func.sum(sales_models.SaleItem.line_total).label("revenue"),
        )
        .group_by(sales_models.SaleItem.product_name)
        .order_by(total_sold.desc(), sales_models.SaleItem.product_name)
        .limit(limit or settings.TOP_PRODUCTS_LIMIT)
        .all()
    )

    return [
        {
            "product_name": row.product_name,
            "total_sold": int(row.total_sold or 0),
            "revenue": float(row.revenue or 0),
        }
        for row in rows
    ]


def low_stock(db: Session, threshold: Optional[int] = None):
    threshold = threshold or settings.LOW_STOCK_THRESHOLD

    products = (
        db.query(product_models.Product)
        .options(joinedload(product_models.Product.category))
        .filter(product_models.Product.quantity < threshold)
        .order_by(product_models.Product.quantity.asc(), product_models.Product.id)
        .all()
    )

    return [
        {
            "id": p.id,
            "name": p.name,
            "category_id": p.category_id,
            "category_name": p.category.name if p.category else None,
            "quantity": p.quantity,
            "selling_price": p.selling_price,
        }
        for p in products
    ]
