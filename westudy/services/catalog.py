"""Reference data: listing categories, university areas and amenities."""

from typing import List

from sqlalchemy.orm import Session

from westudy.models.catalog import Amenity, Category, UniversityArea


def list_categories(db: Session) -> List[Category]:
    return db.query(Category).order_by(Category.label).all()


def list_universities(db: Session) -> List[UniversityArea]:
    return db.query(UniversityArea).order_by(UniversityArea.acronym).all()


def list_amenities(db: Session) -> List[Amenity]:
    return db.query(Amenity).order_by(Amenity.name).all()
