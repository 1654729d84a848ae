"""Core pricing calculations for product scoring.

Formulas:
    Selling Price = Cost Price × (1 + Markup(Cost Price))
    Shopify Fee   = Selling Price × Transaction Fee Rate + Fixed Fee
    Total Cost    = Cost Price + Shopify Fee + Shipping Fee
    Net Profit    = Selling Price - Total Cost
    Profit Margin = Net Profit / Selling Price × 100
"""

import math
from collections.abc import Sequence

from shopscore.scoring.models import (
    FeeModel,
    PriceTier,
    ProfitBreakdown,
    ScoringConfig,
)


def select_markup(
    cost_price: float,
    tiers: Sequence[PriceTier],
    default_markup: float = 0.20,
) -> float:
    """Pick the markup for a cost price.

    Tiers are checked in order and the first match wins. Bounds are
    inclusive; the top tier has no upper bound.

    Args:
        cost_price: Cost price of the product
        tiers: Ordered, non-overlapping price tiers
        default_markup: Markup when the cost falls in no tier

    Returns:
        Markup as decimal (e.g., 0.30 = 30%)
    """
    for tier in tiers:
        if tier.contains(cost_price):
            return tier.markup
    return default_markup


def calculate_selling_price(
    cost_price: float,
    config: ScoringConfig | None = None,
) -> float:
    """Calculate suggested selling price.

    Selling Price = Cost Price × (1 + Markup)

    Args:
        cost_price: Cost price of the product
        config: Scoring configuration (uses defaults if None)

    Returns:
        Suggested selling price
    """
    if config is None:
        config = ScoringConfig()

    markup = select_markup(cost_price, config.price_tiers, config.default_markup)
    return cost_price * (1 + markup)


def calculate_shopify_fee(
    selling_price: float,
    fee_model: FeeModel | None = None,
) -> float:
    """Calculate storefront transaction fee.

    Shopify Fee = Selling Price × Transaction Fee Rate + Fixed Fee
    """
    if fee_model is None:
        fee_model = FeeModel()

    return selling_price * fee_model.transaction_fee_rate + fee_model.fixed_fee


def calculate_profit(
    cost_price: float,
    selling_price: float,
    shipping_fee: float = 0.0,
    fee_model: FeeModel | None = None,
) -> ProfitBreakdown:
    """Calculate net profit and margin for a selling price.

    Args:
        cost_price: Cost price of the product
        selling_price: Price we'll sell at
        shipping_fee: Shipping cost we pay
        fee_model: Storefront fees (uses defaults if None)

    Returns:
        ProfitBreakdown; profit_margin is 0.0 when the selling price is
        not positive
    """
    shopify_fee = calculate_shopify_fee(selling_price, fee_model)
    total_cost = cost_price + shopify_fee + shipping_fee
    net_profit = selling_price - total_cost

    if selling_price <= 0:
        profit_margin = 0.0
    else:
        profit_margin = net_profit / selling_price * 100
        if not math.isfinite(profit_margin):
            profit_margin = 0.0

    return ProfitBreakdown(
        selling_price=selling_price,
        shopify_fee=shopify_fee,
        shipping_fee=shipping_fee,
        total_cost=total_cost,
        net_profit=net_profit,
        profit_margin=profit_margin,
    )
