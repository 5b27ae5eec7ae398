from lending_metrics.metrics.market import apply_market_delta, mark_to_market
from lending_metrics.metrics.protocol import recompute_totals, update_protocol
from lending_metrics.metrics.revenue import RevenueScope, apply_revenue
from lending_metrics.metrics.snapshots import update_financials_snapshot, update_market_snapshots
from lending_metrics.metrics.usage import classify_transaction, update_usage_metrics

__all__ = (
    "RevenueScope",
    "apply_market_delta",
    "apply_revenue",
    "classify_transaction",
    "mark_to_market",
    "recompute_totals",
    "update_financials_snapshot",
    "update_market_snapshots",
    "update_protocol",
    "update_usage_metrics",
)
