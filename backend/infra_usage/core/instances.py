from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterable, Protocol, TypeVar

DEFAULT_INSTANCE_ID: Final[str] = "addon_instance_micro"
DEFAULT_INSTANCE_NAME: Final[str] = "Micro"
INSTANCE_MARKER: Final[str] = "_instance_"
DAILY_BURST_MINUTES: Final[int] = 30


@dataclass(frozen=True)
class ComputeInstanceSpec:
    product_id: str
    name: str
    max_bandwidth: int
    base_bandwidth: int


class _Addon(Protocol):
    product_id: str


AddonT = TypeVar("AddonT", bound=_Addon)


def _spec(product_id: str, name: str, max_bandwidth: int, base_bandwidth: int) -> ComputeInstanceSpec:
    return ComputeInstanceSpec(
        product_id=product_id,
        name=name,
        max_bandwidth=max_bandwidth,
        base_bandwidth=base_bandwidth,
    )


# Bandwidth in Mbps.
COMPUTE_INSTANCE_SPECS: Final[dict[str, ComputeInstanceSpec]] = {
    spec.product_id: spec
    for spec in (
        _spec("addon_instance_micro", "Micro", 2085, 87),
        _spec("addon_instance_small", "Small", 2085, 174),
        _spec("addon_instance_medium", "Medium", 2085, 347),
        _spec("addon_instance_large", "Large", 4750, 630),
        _spec("addon_instance_xlarge", "XL", 4750, 1188),
        _spec("addon_instance_xxlarge", "2XL", 4750, 2375),
        _spec("addon_instance_4xlarge", "4XL", 4750, 4750),
        _spec("addon_instance_8xlarge", "8XL", 9500, 9500),
        _spec("addon_instance_12xlarge", "12XL", 14250, 14250),
        _spec("addon_instance_16xlarge", "16XL", 19000, 19000),
    )
}


def get_instance_spec(product_id: str | None) -> ComputeInstanceSpec:
    if not product_id:
        return COMPUTE_INSTANCE_SPECS[DEFAULT_INSTANCE_ID]
    return COMPUTE_INSTANCE_SPECS.get(product_id, COMPUTE_INSTANCE_SPECS[DEFAULT_INSTANCE_ID])


def find_compute_instance(addons: Iterable[AddonT]) -> AddonT | None:
    """Return the first add-on that provisions a compute instance."""
    return next((addon for addon in addons if INSTANCE_MARKER in addon.product_id), None)


def format_bandwidth(mbps: int) -> str:
    return f"{mbps:,} Mbps"


__all__ = [
    "COMPUTE_INSTANCE_SPECS",
    "DAILY_BURST_MINUTES",
    "DEFAULT_INSTANCE_ID",
    "DEFAULT_INSTANCE_NAME",
    "ComputeInstanceSpec",
    "find_compute_instance",
    "format_bandwidth",
    "get_instance_spec",
]
