from datetime import date


class BackendQueryError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class SupabaseError(BackendQueryError):
    pass


class RateLimitError(BackendQueryError):
    def __init__(self, service: str):
        self.service = service
        super().__init__(f"Rate limit exceeded for {service}", status_code=429)


class UnitUnavailableError(Exception):
    def __init__(self, unit_ids: list[int], check_in: date, check_out: date):
        self.unit_ids = unit_ids
        self.check_in = check_in
        self.check_out = check_out
        self.message = (
            f"Units {unit_ids} are not available "
            f"from {check_in.isoformat()} to {check_out.isoformat()}"
        )
        super().__init__(self.message)


class PricingDataMissingError(Exception):
    def __init__(
        self,
        unit_id: int,
        check_in: date,
        check_out: date,
        missing_nights: list[date] | None = None,
    ):
        self.unit_id = unit_id
        self.check_in = check_in
        self.check_out = check_out
        self.missing_nights = missing_nights or []
        self.message = (
            f"No weekly price found for unit {unit_id} "
            f"in period {check_in.isoformat()} - {check_out.isoformat()}"
        )
        super().__init__(self.message)
