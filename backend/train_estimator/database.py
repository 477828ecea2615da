"""Database models and setup for the local base fare datastore."""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import Column, Float, Integer, String, UniqueConstraint, create_engine, func
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from train_estimator.config import settings
from train_estimator.models import BaseFare

logger = logging.getLogger(__name__)

Base = declarative_base()


class BaseFareDB(Base):
    """Database model for storing base fares between two cities."""
    __tablename__ = "base_fares"

    id = Column(Integer, primary_key=True, index=True)
    from_city = Column(String, nullable=False)
    to_city = Column(String, nullable=False)
    fare = Column(Float, nullable=False)
    description = Column(String, nullable=True)

    # Ensure unique combination of from_city and to_city
    __table_args__ = (
        UniqueConstraint('from_city', 'to_city', name='_city_pair_uc'),
    )

    def __repr__(self):
        return f"<BaseFare(from_city={self.from_city}, to_city={self.to_city}, fare={self.fare})>"


class DatabaseManager:
    """Manager class for database operations."""

    def __init__(self, database_url: Optional[str] = None):
        """Initialize database connection."""
        self.database_url = database_url or settings.DATABASE_URL

        # Create engine with appropriate settings for SQLite
        connect_args = {"check_same_thread": False} if "sqlite" in self.database_url else {}
        self.engine = create_engine(self.database_url, connect_args=connect_args)

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        Base.metadata.create_all(bind=self.engine)

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.SessionLocal()

    def init_default_fares(self):
        """Seed the datastore with default base fares when it is empty."""
        default_fares = [
            ("Bordeaux", "Paris", 20.0),
            ("Lyon", "Paris", 35.0),
            ("Marseille", "Paris", 55.0),
            ("Lille", "Paris", 25.0),
            ("Bordeaux", "Toulouse", 15.0),
        ]

        session = self.get_session()
        try:
            if session.query(BaseFareDB).count() == 0:
                for from_city, to_city, fare in default_fares:
                    session.add(BaseFareDB(
                        from_city=from_city,
                        to_city=to_city,
                        fare=fare,
                        description=f"{from_city} to {to_city}"
                    ))
                session.commit()
                logger.info("Initialized %d default base fares", len(default_fares))
        finally:
            session.close()

    def get_all_fares(self) -> Dict[Tuple[str, str], float]:
        """Retrieve all base fares from database."""
        session = self.get_session()
        try:
            rows = session.query(BaseFareDB).all()
            return {(row.from_city, row.to_city): row.fare for row in rows}
        finally:
            session.close()

    def get_available_cities(self) -> List[str]:
        """Get all cities that appear in a stored fare."""
        cities = set()
        for from_city, to_city in self.get_all_fares():
            cities.add(from_city)
            cities.add(to_city)
        return sorted(cities)

    def _find(self, session: Session, from_city: str, to_city: str) -> Optional[BaseFareDB]:
        return session.query(BaseFareDB).filter(
            func.lower(BaseFareDB.from_city) == from_city.strip().lower(),
            func.lower(BaseFareDB.to_city) == to_city.strip().lower()
        ).first()

    def get_fare(self, from_city: str, to_city: str) -> Optional[float]:
        """Get base fare for a city pair, in either direction."""
        session = self.get_session()
        try:
            row = self._find(session, from_city, to_city)
            if row:
                return row.fare

            # Fares are the same both ways
            row = self._find(session, to_city, from_city)
            return row.fare if row else None
        finally:
            session.close()

    def update_fare(self, from_city: str, to_city: str, new_fare: float) -> BaseFare:
        """Update or create a base fare."""
        session = self.get_session()
        try:
            row = self._find(session, from_city, to_city) or self._find(session, to_city, from_city)

            if row:
                row.fare = new_fare
            else:
                row = BaseFareDB(
                    from_city=from_city.strip(),
                    to_city=to_city.strip(),
                    fare=new_fare,
                    description=f"{from_city.strip()} to {to_city.strip()}"
                )
                session.add(row)

            session.commit()
            return BaseFare(from_city=row.from_city, to_city=row.to_city, fare=row.fare)
        finally:
            session.close()


# Singleton instance
_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """Get singleton database manager instance."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
        _db_manager.init_default_fares()
    return _db_manager
