class ExternalServiceError(Exception):
    """A third-party API (HeyGen, RunwayML, OpenAI) failed or is not configured."""

    def __init__(self, message: str, status_code: int = 502, service: str = "external"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.service = service

    def __str__(self) -> str:
        return self.message
