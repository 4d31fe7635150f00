"""Ledger layer package for pricing and trade application boundaries."""

from .interfaces import PricingPort, TradeApplierPort
from .pricing import NavPricingService
from .trade_applier import (
	LEDGER_MIN_DIVISION_SCALE,
	LEDGER_SUPPORTED_ROUNDING_MODES,
	TradeApplier,
	TradeApplierConfig,
)

__all__ = [
	"LEDGER_MIN_DIVISION_SCALE",
	"LEDGER_SUPPORTED_ROUNDING_MODES",
	"NavPricingService",
	"PricingPort",
	"TradeApplier",
	"TradeApplierConfig",
	"TradeApplierPort",
]
