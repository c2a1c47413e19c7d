"""Sample geofile metadata for fresh databases."""
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.logging_config import get_logger
from app.repositories import GeofileRepository

logger = get_logger(__name__)

SAMPLE_GEOFILES: List[Dict[str, Any]] = [
    {
        "name": "Downtown Patrol Zones",
        "description": "Patrol beat boundaries for the downtown precinct",
        "category": "patrol",
        "originalName": "downtown_patrol_zones.kml",
        "fileType": "kml",
        "fileSize": 48213,
        "mimeType": "application/vnd.google-earth.kml+xml",
        "tags": ["patrol", "downtown"],
    },
    {
        "name": "Crime Hotspots 2024",
        "description": "Aggregated incident hotspots for the last reporting year",
        "category": "analysis",
        "originalName": "crime_hotspots_2024.geojson",
        "fileType": "geojson",
        "fileSize": 112904,
        "mimeType": "application/geo+json",
        "tags": ["hotspots", "analysis"],
    },
    {
        "name": "Checkpoint Locations",
        "description": "Fixed traffic checkpoint coordinates",
        "category": "traffic",
        "originalName": "checkpoints.csv",
        "fileType": "csv",
        "fileSize": 3120,
        "mimeType": "text/csv",
        "tags": ["traffic"],
    },
    {
        "name": "Incident Response Route",
        "description": "Recorded GPS track of a rapid response drill",
        "category": "operations",
        "originalName": "response_route.gpx",
        "fileType": "gpx",
        "fileSize": 20571,
        "mimeType": "application/gpx+xml",
        "tags": ["gps", "drill"],
    },
]


async def seed_geofiles(database: Optional[AsyncIOMotorDatabase] = None) -> int:
    """Insert the sample geofiles unless they already exist; returns the number inserted."""
    repo = GeofileRepository(database)
    if await repo.count({"isSample": True}) > 0:
        logger.info("Sample geofiles already present, skipping")
        return 0

    for sample in SAMPLE_GEOFILES:
        await repo.create({**sample, "isSample": True, "uploadedBy": "system"})

    logger.info(f"Seeded {len(SAMPLE_GEOFILES)} sample geofiles")
    return len(SAMPLE_GEOFILES)
