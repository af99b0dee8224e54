from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from westudy.db.session import get_db
from westudy.schemas.catalog import Amenity, Category, UniversityArea
from westudy.services import catalog as catalog_service

router = APIRouter(tags=["Catalog"])


@router.get("/categories", response_model=List[Category])
def list_categories(db: Session = Depends(get_db)):
    return catalog_service.list_categories(db)


@router.get("/universities", response_model=List[UniversityArea])
def list_universities(db: Session = Depends(get_db)):
    return catalog_service.list_universities(db)


@router.get("/amenities", response_model=List[Amenity])
def list_amenities(db: Session = Depends(get_db)):
    return catalog_service.list_amenities(db)
