from .enums import InfraAttribute, MetricInterval, PricingTier, UsageSeverity

__all__ = [
    "InfraAttribute",
    "MetricInterval",
    "PricingTier",
    "UsageSeverity",
]
