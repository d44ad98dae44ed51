import logging
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from typing import Annotated, AsyncGenerator

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from api.dependencies import get_tvl_service
from config import config
from domain.valuation import OrganizationId
from services.tvl_service import RunInProgressError, TvlService, build_default_service

logger = logging.getLogger(__name__)


class ValuationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_value_usd: Decimal = Field(serialization_alias="totalValueUsd")
    last_updated: datetime | None = Field(serialization_alias="lastUpdated")

    @field_serializer("total_value_usd")
    def _serialize_total(self, value: Decimal) -> str:
        # Fixed-point string, never a float or exponent notation.
        return f"{value:f}"


class UnavailableResponse(BaseModel):
    unavailable: bool = True
    error: str = "TVL data not available"


class MessageResponse(BaseModel):
    message: str


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI) -> AsyncGenerator[None, None]:
    if hasattr(fastapi_app.state, "tvl_service"):
        yield
        return
    service = build_default_service(config())
    fastapi_app.state.tvl_service = service
    yield
    service.close()


app = FastAPI(lifespan=lifespan)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.get("/tvl/latest", response_model=None)
def get_latest_tvl(
    service: Annotated[TvlService, Depends(get_tvl_service)],
) -> ValuationResponse | UnavailableResponse:
    try:
        latest = service.latest_fleet_valuation()
    except Exception:
        logger.exception("Error fetching latest TVL")
        return UnavailableResponse()
    if latest is None:
        return UnavailableResponse()
    return ValuationResponse(total_value_usd=latest.total_value_usd, last_updated=latest.computed_at)


@app.get("/tvl/update", response_model=None)
def update_tvl(service: Annotated[TvlService, Depends(get_tvl_service)]) -> MessageResponse | JSONResponse:
    try:
        service.trigger_fleet_recompute()
    except RunInProgressError:
        return _error(409, "TVL update already in progress")
    except Exception:
        logger.exception("Error initiating TVL update")
        return _error(500, "Error initiating TVL update")
    return MessageResponse(message="TVL update initiated")


@app.get("/tvl/organizations/{organization_id}/latest", response_model=None)
def get_latest_organization_tvl(
    organization_id: str,
    service: Annotated[TvlService, Depends(get_tvl_service)],
) -> ValuationResponse | UnavailableResponse:
    try:
        latest = service.latest_organization_valuation(OrganizationId(organization_id))
    except Exception:
        logger.exception("Error fetching latest TVL for organization %s", organization_id)
        return UnavailableResponse()
    if latest is None:
        return UnavailableResponse()
    return ValuationResponse(total_value_usd=latest.total_value_usd, last_updated=latest.computed_at)


@app.post("/tvl/organizations/{organization_id}/update", response_model=None)
def update_organization_tvl(
    organization_id: str,
    service: Annotated[TvlService, Depends(get_tvl_service)],
) -> ValuationResponse | JSONResponse:
    try:
        total = service.recompute_organization(OrganizationId(organization_id))
        latest = service.latest_organization_valuation(OrganizationId(organization_id))
    except RunInProgressError:
        return _error(409, "TVL update already in progress")
    except Exception:
        logger.exception("Error updating TVL for organization %s", organization_id)
        return _error(500, "Error updating organization TVL")
    return ValuationResponse(
        total_value_usd=total, last_updated=latest.computed_at if latest is not None else None
    )
