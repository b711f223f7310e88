class RatesException(Exception):
    pass


class ProviderError(RatesException):
    pass


class NormalizationError(ProviderError):
    pass


class ConfigurationError(RatesException):
    pass


class RatesUnavailableError(RatesException):
    def __init__(self, message: str, retry_after: int | None = None):
        super().__init__(message)
        self.retry_after = retry_after
