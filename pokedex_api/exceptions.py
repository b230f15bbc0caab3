from fastapi import HTTPException, status


# Raised for upstream outages, timeouts and non-404 error statuses (503)
class UpstreamUnavailable(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"External API Error: {detail}",
        )


class NotFound(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


# Species / evolution-chain failures while composing a detail view (500)
class InternalDependencyFailure(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to resolve evolution data: {detail}",
        )
