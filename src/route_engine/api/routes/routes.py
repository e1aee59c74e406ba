"""Routing endpoints."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ...models.domain import Coordinate
from ...schemas.routing import (
    CoordinateModel,
    DirectionsRequest,
    LocationModel,
    MonitorRequest,
    OptimizeRequest,
    RouteAdjustmentModel,
    RouteModel,
    RouteSegmentModel,
)
from ...services.routing.osrm_client import DirectionsError
from ...services.routing.service import RouteOptimizer

router = APIRouter(prefix="/routes", tags=["routes"])

logger = logging.getLogger(__name__)


def get_optimizer(request: Request) -> RouteOptimizer:
    return request.app.state.optimizer


def _coordinate_model(coordinate: Coordinate) -> CoordinateModel:
    return CoordinateModel(latitude=coordinate[0], longitude=coordinate[1])


@router.post("/optimize", response_model=RouteModel, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizeRequest, optimizer: RouteOptimizer = Depends(get_optimizer)) -> RouteModel:
    try:
        route = optimizer.optimize(
            [location.to_domain() for location in payload.locations],
            [task.to_domain() for task in payload.tasks],
            payload.start_location.to_domain() if payload.start_location else None,
            payload.constraints.to_domain(),
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}",
        ) from exc
    return RouteModel.from_domain(route)


@router.post("/directions", response_model=List[RouteSegmentModel], status_code=status.HTTP_200_OK)
def directions(payload: DirectionsRequest, optimizer: RouteOptimizer = Depends(get_optimizer)) -> List[RouteSegmentModel]:
    try:
        segments = optimizer.get_directions(payload.route.to_domain(), payload.start_location.to_domain())
    except DirectionsError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return [
        RouteSegmentModel(
            origin=_coordinate_model(segment.origin),
            destination=_coordinate_model(segment.destination),
            location=LocationModel.model_validate(segment.location),
            distance_km=segment.distance_km,
            estimated_duration_min=segment.estimated_duration_min,
            instructions=segment.instructions,
            traffic_severity=segment.traffic_severity,
            segment_index=segment.segment_index,
        )
        for segment in segments
    ]


@router.post("/monitor", response_model=Optional[RouteAdjustmentModel], status_code=status.HTTP_200_OK)
def monitor(payload: MonitorRequest, optimizer: RouteOptimizer = Depends(get_optimizer)) -> Optional[RouteAdjustmentModel]:
    try:
        adjustment = optimizer.monitor(
            payload.route.to_domain(),
            payload.current_location.to_domain(),
            set(payload.completed_stop_ids),
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error checking route progress: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to check route progress: {str(exc)}",
        ) from exc
    if adjustment is None:
        return None
    return RouteAdjustmentModel(
        reason=adjustment.reason,
        suggested_route=RouteModel.from_domain(adjustment.suggested_route),
        time_saved_min=adjustment.time_saved_min,
    )
