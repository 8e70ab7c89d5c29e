from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from calmwalk.db import get_db
from calmwalk.schemas.walk import CalmZone, StressZone
from calmwalk import store


router = APIRouter(prefix="/zones", tags=["zones"])


@router.get("/calm", response_model=list[CalmZone])
def list_calm_zones(db: Session = Depends(get_db)):
    return store.load_calm_zones(db)


@router.get("/stress", response_model=list[StressZone])
def list_stress_zones(db: Session = Depends(get_db)):
    return store.load_stress_zones(db)


@router.delete("/")
def clear_zones(db: Session = Depends(get_db)):
    store.clear_zones(db)
    return {"message": "Zones cleared"}
