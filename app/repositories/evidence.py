from .base import MongoRepository


class EvidenceRepository(MongoRepository):
    """Evidence items, numbered EV-000001, EV-000002, ..."""

    collection_name = "evidence"
    number_field = "evidenceNumber"
    number_prefix = "EV"
