from sqlalchemy import Column, String, Text, Float
from sqlalchemy.orm import relationship
from westudy.db.session import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(50), primary_key=True)  # e.g. 'kitnet', 'republica'
    label = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    icon_name = Column(String(50), nullable=True)  # resolved to an icon by the client

    listings = relationship("Listing", back_populates="category")


class UniversityArea(Base):
    __tablename__ = "university_areas"

    id = Column(String(50), primary_key=True)  # e.g. 'usp-butanta'
    name = Column(String(255), nullable=False)
    acronym = Column(String(20), nullable=False, unique=True, index=True)
    city = Column(String(100), nullable=False, index=True)
    neighborhood = Column(String(100), nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)

    listings = relationship("Listing", back_populates="university")


class Amenity(Base):
    __tablename__ = "amenities"

    id = Column(String(50), primary_key=True)  # e.g. 'wifi'
    name = Column(String(100), nullable=False)
    icon_name = Column(String(50), nullable=True)
