from abc import ABC, abstractmethod

from waterdesk.models.tariff import ChargeBreakdown, SystemSettings


class TariffCalculator(ABC):
    @abstractmethod
    def calculate(
        self,
        consumption: float,
        service_type: str,
        meter_size: str = '1/2"',
        system_settings: SystemSettings | None = None,
    ) -> ChargeBreakdown:
        """Price a consumption reading. Must be pure and deterministic.

        The returned breakdown's ``total_calculated_charges`` must equal the
        sum of its itemized components.
        """
        ...
