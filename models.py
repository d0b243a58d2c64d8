"""Database models for the XAX alias tables."""

from itertools import islice
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from sqlalchemy import BigInteger, Column, Integer, String, Text, create_engine, event, func
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def unsigned_id(value: int) -> str:
    """Format a signed 64-bit id the way clients expect, as unsigned decimal."""
    return str(value & 0xFFFFFFFFFFFFFFFF)


def parse_id(text: str) -> int:
    """Parse an unsigned decimal id into the signed 64-bit value that is stored.

    Raises:
        ValueError: If the text is not an id in the unsigned 64-bit range
    """
    value = int(text.strip())
    if value < 0 or value > 0xFFFFFFFFFFFFFFFF:
        raise ValueError(f"Id out of range: {text}")
    if value > 0x7FFFFFFFFFFFFFFF:
        value -= 1 << 64
    return value


class Alias(Base):
    """An alias name registered by an account."""
    __tablename__ = 'aliases'

    id = Column(BigInteger, primary_key=True)
    account_id = Column(BigInteger, nullable=False, index=True)
    alias_name = Column(String(100), nullable=False)
    alias_uri = Column(Text, nullable=False, default='')
    timestamp = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<Alias(id={self.id}, alias_name='{self.alias_name}')>"

    def to_json(self) -> Dict:
        """JSON representation; ids are strings to survive 64-bit rounding."""
        return {
            'alias': unsigned_id(self.id),
            'account': unsigned_id(self.account_id),
            'aliasName': self.alias_name,
            'aliasURI': self.alias_uri,
            'timestamp': self.timestamp,
        }


def filter_page(items: Iterable, predicate: Callable, first_index: int,
                last_index: int) -> Iterator:
    """Lazily yield the matching items numbered first_index..last_index.

    Indexes are zero-based, inclusive, and count only items that pass
    ``predicate``.
    """
    first_index = max(first_index, 0)
    if last_index < first_index:
        return iter(())
    matching = (item for item in items if predicate(item))
    return islice(matching, first_index, last_index + 1)


class DatabaseManager:
    """Database connection and session management."""

    def __init__(self, connection_string: str):
        self.engine = create_engine(connection_string, echo=False)

        if 'sqlite' in connection_string:
            @event.listens_for(self.engine, "connect")
            def set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        self.SessionLocal = sessionmaker(bind=self.engine)

    def create_tables(self):
        """Create all tables."""
        Base.metadata.create_all(bind=self.engine)

    def get_session(self):
        """Get a database session."""
        return self.SessionLocal()

    def close(self):
        """Close the database connection."""
        self.engine.dispose()


class DatabaseService:
    """High-level database operations."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    def add_alias(self, alias_id: int, account_id: int, alias_name: str,
                  alias_uri: str, timestamp: int) -> Alias:
        """Insert an alias record."""
        session = self.db_manager.get_session()
        try:
            alias = Alias(
                id=alias_id,
                account_id=account_id,
                alias_name=alias_name,
                alias_uri=alias_uri,
                timestamp=timestamp,
            )
            session.add(alias)
            session.commit()
            session.refresh(alias)
            session.expunge(alias)
            return alias
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_aliases(self, account_id: int, timestamp: int = 0,
                    first_index: int = 0, last_index: Optional[int] = None) -> List[Dict]:
        """Get one page of an account's aliases as JSON-ready dicts.

        Aliases are ordered by lower-cased name and only those with
        ``timestamp`` at or after the given bound are counted.

        Args:
            account_id: Owner account
            timestamp: Inclusive lower bound on alias timestamp
            first_index: Zero-based index of the first alias to return
            last_index: Inclusive index of the last alias, None for no limit

        Returns:
            List of alias dicts
        """
        if last_index is None:
            last_index = 2 ** 31 - 1

        session = self.db_manager.get_session()
        try:
            query = (
                session.query(Alias)
                .filter(Alias.account_id == account_id)
                .order_by(func.lower(Alias.alias_name))
                .yield_per(100)
            )
            page = filter_page(
                query, lambda alias: alias.timestamp >= timestamp, first_index, last_index
            )
            return [alias.to_json() for alias in page]
        finally:
            session.close()

    def count_aliases(self, account_id: int) -> int:
        session = self.db_manager.get_session()
        try:
            return session.query(Alias).filter(Alias.account_id == account_id).count()
        finally:
            session.close()
