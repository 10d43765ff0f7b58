"""
Persistence gateways for users, complaints and complaint updates.
"""

from campus_complaints.repositories.gateway import PersistenceGateway
from campus_complaints.repositories.memory_gateway import InMemoryGateway, STORAGE_KEYS
from campus_complaints.repositories.seed import DEMO_USERS, seed_demo_users
from campus_complaints.repositories.sql_gateway import SqlAlchemyGateway

__all__ = [
    "PersistenceGateway",
    "InMemoryGateway",
    "SqlAlchemyGateway",
    "STORAGE_KEYS",
    "DEMO_USERS",
    "seed_demo_users",
]
