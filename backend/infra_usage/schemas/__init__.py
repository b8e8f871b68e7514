from .usage import InfrastructurePanelRead, IoBudgetStatusRead, UsageCategoryRead

__all__ = [
    "InfrastructurePanelRead",
    "IoBudgetStatusRead",
    "UsageCategoryRead",
]
