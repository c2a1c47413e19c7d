from .base import MongoRepository


class CustodialRecordRepository(MongoRepository):
    """Custodial records, numbered CR-000001, CR-000002, ..."""

    collection_name = "custodial_records"
    number_field = "recordNumber"
    number_prefix = "CR"
