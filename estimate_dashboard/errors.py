class EstimateError(ValueError):
    pass


class DuplicateEstimateError(EstimateError):
    def __init__(self, estimate_id: object) -> None:
        super().__init__(f"Estimate {estimate_id} already exists")
        self.estimate_id = estimate_id


class EstimateNotFoundError(EstimateError, LookupError):
    def __init__(self, estimate_id: object) -> None:
        super().__init__(f"Estimate {estimate_id} not found")
        self.estimate_id = estimate_id


class BilledFlagError(EstimateError):
    def __init__(self, estimate_id: object) -> None:
        super().__init__(f"Estimate {estimate_id} is already billed and cannot be un-billed")
        self.estimate_id = estimate_id


class MissingFieldError(EstimateError):
    def __init__(self, field_names: list[str]) -> None:
        super().__init__(f"Missing required fields: {', '.join(field_names)}")
        self.field_names = field_names
