"""
Service de calcul des charges d'essai / Test load calculation service.
Coefficients reglementaires selon le marquage CE.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

# (dynamique, statique) / (dynamic, static)
CE_COEFFICIENTS = (Decimal("1.1"), Decimal("1.25"))
NON_CE_COEFFICIENTS = (Decimal("1.2"), Decimal("1.5"))


@dataclass(frozen=True)
class TestLoads:
    """Charges d'epreuve en kg / Test loads in kg."""
    __test__ = False

    dynamic: int
    static: int
    dynamic_coefficient: float
    static_coefficient: float


class ChargeCalculatorService:
    """Calcul des charges d'epreuve / Test load calculation."""

    @staticmethod
    def round_half_away(value: Decimal) -> int:
        """Arrondi a l'entier, 0,5 s'eloigne de zero / Round to integer, ties away from zero."""
        return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @staticmethod
    def compute_loads(nominal_capacity: float | int | None, is_ce: bool) -> TestLoads:
        """
        Charges dynamique et statique / Dynamic and static test loads.
        CE : 1.1 x CMU et 1.25 x CMU. Non CE : 1.2 x CMU et 1.5 x CMU.
        Produit decimal exact, pas d'erreur d'arrondi flottant.
        """
        dyn_coef, stat_coef = CE_COEFFICIENTS if is_ce else NON_CE_COEFFICIENTS
        if not nominal_capacity or nominal_capacity <= 0:
            return TestLoads(0, 0, float(dyn_coef), float(stat_coef))

        capacity = Decimal(str(nominal_capacity))
        return TestLoads(
            dynamic=ChargeCalculatorService.round_half_away(capacity * dyn_coef),
            static=ChargeCalculatorService.round_half_away(capacity * stat_coef),
            dynamic_coefficient=float(dyn_coef),
            static_coefficient=float(stat_coef),
        )


def compute_loads(nominal_capacity: float | int | None, is_ce: bool) -> TestLoads:
    return ChargeCalculatorService.compute_loads(nominal_capacity, is_ce)
