from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from calmwalk.db import get_db
from calmwalk import store


router = APIRouter(prefix="/export", tags=["export"])


@router.get("/")
def export_all(db: Session = Depends(get_db)):
    """Sessions and both zone stores as one JSON document."""
    return store.export_data(db)


@router.delete("/")
def clear_all(db: Session = Depends(get_db)):
    store.clear_all_data(db)
    return {"message": "All data cleared"}
