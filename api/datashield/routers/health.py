from fastapi import APIRouter, Depends

from ..deps import Services, get_services
from ..pipeline.analyze import utcnow
from ..schemas import HealthOut

router = APIRouter()


@router.get("", response_model=HealthOut)
def health(services: Services = Depends(get_services)) -> HealthOut:
    """Return API status and DB connectivity flag."""
    return HealthOut(status="ok", timestamp=utcnow(), db=services.store.ping())
