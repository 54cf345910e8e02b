"""Tiered water tariff: block-rate basic charge plus percentage surcharges.

Rates are pesos per cubic meter. Each component is rounded to the centavo
and the total is the sum of the rounded components, so a breakdown always
reconciles exactly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from waterdesk.exceptions import TariffError
from waterdesk.models.tariff import ChargeBreakdown, SystemSettings
from waterdesk.tariff.base import TariffCalculator

logger = logging.getLogger(__name__)

D = Decimal


@dataclass(frozen=True)
class RateLadder:
    minimum_charge: Decimal  # flat charge covering the first ``minimum_volume`` m³
    minimum_volume: Decimal
    blocks: tuple[tuple[Decimal | None, Decimal], ...]  # (upper bound m³ or None, rate)

    def basic_charge(self, consumption: Decimal) -> Decimal:
        charge = self.minimum_charge
        lower = self.minimum_volume
        for upper, rate in self.blocks:
            if consumption <= lower:
                break
            top = consumption if upper is None else min(consumption, upper)
            charge += (top - lower) * rate
            if upper is None:
                break
            lower = upper
        return charge


RESIDENTIAL = RateLadder(
    minimum_charge=D("195.49"),
    minimum_volume=D(10),
    blocks=(
        (D(20), D("23.82")),
        (D(30), D("45.17")),
        (D(50), D("59.54")),
        (D(70), D("69.52")),
        (D(90), D("72.89")),
        (D(140), D("76.14")),
        (D(200), D("79.42")),
        (None, D("82.67")),
    ),
)

RESIDENTIAL_LOW_INCOME = RateLadder(
    minimum_charge=D("70.07"),
    minimum_volume=D(10),
    blocks=(
        (D(20), D("14.29")),
        (D(30), D("23.82")),
        (D(40), D("45.17")),
        (None, D("59.54")),
    ),
)

SEMI_BUSINESS = RateLadder(
    minimum_charge=D("195.49"),
    minimum_volume=D(10),
    blocks=(
        (D(20), D("39.90")),
        (D(40), D("49.22")),
        (D(60), D("62.55")),
        (D(80), D("72.88")),
        (D(130), D("76.14")),
        (D(180), D("79.42")),
        (None, D("82.67")),
    ),
)

DEFAULT_LADDER = RateLadder(
    minimum_charge=D("195.49"),
    minimum_volume=D(10),
    blocks=((None, D("23.82")),),
)

LADDERS: dict[str, RateLadder] = {
    "Residential": RESIDENTIAL,
    "Residential Low-Income": RESIDENTIAL_LOW_INCOME,
    "Semi-Business": SEMI_BUSINESS,
}

# Service types that also pay the sewerage charge.
SEWERAGE_SERVICE_TYPES = frozenset({"Commercial", "Industrial", "Admin", "Meter Reading Personnel"})

MAINTENANCE_CHARGES: dict[str, Decimal] = {
    "1/2": D("1.50"),
    "15mm": D("1.50"),
    "3/4": D("2.00"),
    "20mm": D("2.00"),
    "1": D("3.00"),
    "25mm": D("3.00"),
    "1 1/4": D("4.00"),
    "40mm": D("4.00"),
    "1 1/2": D("4.00"),
    "32mm": D("4.00"),
    "2": D("6.00"),
    "50mm": D("6.00"),
    "3": D("10.00"),
    "75mm": D("10.00"),
    "4": D("20.00"),
    "100mm": D("20.00"),
    "6": D("35.00"),
    "150mm": D("35.00"),
    "8": D("50.00"),
    "200mm": D("50.00"),
}
DEFAULT_MAINTENANCE_CHARGE = D("1.50")


def clean_meter_size(meter_size: str) -> str:
    return str(meter_size).replace('"', "").replace("“", "").replace("”", "").strip()


def _centavos(pesos: Decimal) -> int:
    return int((pesos * 100).quantize(D(1), rounding=ROUND_HALF_UP))


def _rate(percentage: float) -> Decimal:
    return D(str(percentage)) / 100


class TieredTariffCalculator(TariffCalculator):
    def __init__(
        self,
        ladders: dict[str, RateLadder] | None = None,
        default_ladder: RateLadder = DEFAULT_LADDER,
    ) -> None:
        self.ladders = LADDERS if ladders is None else ladders
        self.default_ladder = default_ladder

    def calculate(
        self,
        consumption: float,
        service_type: str,
        meter_size: str = '1/2"',
        system_settings: SystemSettings | None = None,
    ) -> ChargeBreakdown:
        rates = system_settings or SystemSettings()
        try:
            volume = D(str(consumption))
        except InvalidOperation as e:
            raise TariffError(f"Invalid consumption: {consumption!r}") from e
        if not volume.is_finite() or volume < 0:
            raise TariffError(f"Invalid consumption: {consumption!r}")

        ladder = self.ladders.get(service_type)
        if ladder is None:
            logger.debug("No rate ladder for service type %r, using default", service_type)
            ladder = self.default_ladder

        size = clean_meter_size(meter_size)
        maintenance = MAINTENANCE_CHARGES.get(size, DEFAULT_MAINTENANCE_CHARGE)

        basic = ladder.basic_charge(volume)
        fcda = basic * _rate(rates.fcda_percentage)
        water = basic + fcda
        environmental = water * _rate(rates.environmental_charge_percentage)
        if service_type in SEWERAGE_SERVICE_TYPES:
            sewerage = water * _rate(rates.sewerage_charge_percentage_commercial)
        else:
            sewerage = D(0)
        vatable = water + environmental + sewerage + maintenance
        government_taxes = vatable * _rate(rates.government_tax_percentage)
        vat = vatable * _rate(rates.vat_percentage)

        components = {
            "basic_charge": _centavos(basic),
            "fcda": _centavos(fcda),
            "environmental_charge": _centavos(environmental),
            "sewerage_charge": _centavos(sewerage),
            "maintenance_service_charge": _centavos(maintenance),
            "government_taxes": _centavos(government_taxes),
            "vat": _centavos(vat),
        }
        return ChargeBreakdown(
            consumption=float(volume),
            service_type=service_type,
            meter_size=size,
            total_calculated_charges=sum(components.values()),
            **components,
        )
