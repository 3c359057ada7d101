"""
Metrics endpoint for engine timings.
"""
from fastapi import APIRouter
from chartchat.core.performance import PerformanceMonitor

router = APIRouter()


@router.get("/metrics")
async def get_metrics():
    """Aggregated timings for profiling, statistic computation and requests."""
    return {'performance': PerformanceMonitor.get_all_metrics()}
