from .evidence import EvidenceRepository
from .custodial import CustodialRecordRepository
from .geofiles import GeofileRepository
from .users import UserRepository

__all__ = ["EvidenceRepository", "CustodialRecordRepository", "GeofileRepository", "UserRepository"]
