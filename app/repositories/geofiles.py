from typing import Any, Dict, List, Optional

from .base import MongoRepository


class GeofileRepository(MongoRepository):
    collection_name = "geofiles"

    async def list_by_type(self, file_type: Optional[str] = None) -> List[Dict[str, Any]]:
        if file_type:
            return await self.list({"fileType": file_type.lower().lstrip(".")})
        return await self.list()
