from fastapi import APIRouter

from dockerdemo.schemas.hello import ApiInfoResponse, HelloResponse

router = APIRouter(tags=["Hello"])


@router.get("/api", response_model=ApiInfoResponse, summary="List the demo endpoints")
def api_info() -> ApiInfoResponse:
    """JSON landing payload for API consumers (the browser gets the HTML page at /)."""
    return ApiInfoResponse(
        message="Docker demo API",
        endpoints=["/api/hello", "/db-check"],
    )


@router.get("/api/hello", response_model=HelloResponse, summary="Static greeting")
def hello() -> HelloResponse:
    return HelloResponse(message="Hello World from Dockerized FastAPI!")
