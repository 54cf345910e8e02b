"""Error taxonomy shared by the ledger, payment, tariff and assistant layers."""


class WaterdeskError(Exception):
    """Base exception for the application"""


class DataUnavailable(WaterdeskError):
    """The bill store could not be reached"""


class ValidationRejected(WaterdeskError, ValueError):
    """Input rejected locally before any store or network call"""


class LedgerError(WaterdeskError):
    """Ledger consistency violation"""


class NotFound(LedgerError):
    def __init__(self, bill_id: int) -> None:
        super().__init__(f"Bill {bill_id} not found")
        self.bill_id = bill_id


class AlreadyPaid(LedgerError):
    def __init__(self, bill_id: int) -> None:
        super().__init__(f"Bill {bill_id} is already paid")
        self.bill_id = bill_id


class TariffError(WaterdeskError):
    """The tariff calculator failed to price a bill"""


class ReconciliationError(TariffError):
    """Itemized charges do not add up, or the total is negative"""


class OracleFailure(WaterdeskError):
    """The text-generation service did not produce a usable reply"""


class OracleConfigError(OracleFailure):
    """No credential configured; raised before any network call"""


class OracleSafetyBlocked(OracleFailure):
    """The service withheld its reply for safety reasons"""


class OracleRequestError(OracleFailure):
    """Transport error, non-2xx status or malformed response body"""
