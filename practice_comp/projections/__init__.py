from .baseline import resolve_baseline
from .growth import grow_projection
from .propagation import (
    apply_physician_edit,
    rebalance_medical_director_percentages,
    recompute_medical_director_percentages,
    remove_physician,
)

__all__ = [
    "resolve_baseline",
    "grow_projection",
    "apply_physician_edit",
    "rebalance_medical_director_percentages",
    "recompute_medical_director_percentages",
    "remove_physician",
]
