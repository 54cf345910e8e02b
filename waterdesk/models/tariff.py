from __future__ import annotations

from pydantic import BaseModel


class SystemSettings(BaseModel):
    """Percentages applied on top of the basic charge."""

    fcda_percentage: float = 1.29
    environmental_charge_percentage: float = 25
    sewerage_charge_percentage_commercial: float = 32.85
    government_tax_percentage: float = 2
    vat_percentage: float = 12


class ChargeBreakdown(BaseModel):
    """Itemized charges for one bill, all in centavos."""

    consumption: float = 0
    service_type: str = ""
    meter_size: str = ""
    basic_charge: int = 0
    fcda: int = 0
    environmental_charge: int = 0
    sewerage_charge: int = 0
    maintenance_service_charge: int = 0
    government_taxes: int = 0
    vat: int = 0
    total_calculated_charges: int = 0

    @property
    def water_charge(self) -> int:
        return self.basic_charge + self.fcda

    @property
    def components(self) -> dict[str, int]:
        return {
            "basic_charge": self.basic_charge,
            "fcda": self.fcda,
            "environmental_charge": self.environmental_charge,
            "sewerage_charge": self.sewerage_charge,
            "maintenance_service_charge": self.maintenance_service_charge,
            "government_taxes": self.government_taxes,
            "vat": self.vat,
        }

    @property
    def itemized_total(self) -> int:
        return sum(self.components.values())

    def is_reconciled(self) -> bool:
        return self.itemized_total == self.total_calculated_charges
