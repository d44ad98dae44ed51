from fastapi import Request

from services.tvl_service import TvlService


def get_tvl_service(request: Request) -> TvlService:
    return request.app.state.tvl_service
