"""Seed storage from CSV files.

Usage:
    python -m dispatch_engine.tools.seed_db
    python -m dispatch_engine.tools.seed_db --data-dir data
    python -m dispatch_engine.tools.seed_db --drop  # drop existing data first
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from decimal import Decimal
from pathlib import Path

from sqlalchemy import delete

from dispatch_engine.adapters.csv_loader.loader import load_orders, load_services, load_workers
from dispatch_engine.adapters.persistence.models import OrderModel, ServiceModel, WorkerModel
from dispatch_engine.domain.entities.order import CustomerLocation, Order
from dispatch_engine.domain.entities.service import Service
from dispatch_engine.domain.entities.worker import Worker
from dispatch_engine.domain.value_objects.enums import (
    OrderStatus,
    ServiceCategory,
    WorkerAvailability,
)
from dispatch_engine.domain.value_objects.geo_point import GeoPoint
from dispatch_engine.infrastructure.storage import Repositories, open_repositories

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)


async def _drop_data(repos: Repositories) -> None:
    """Delete all rows in FK-safe order. Only meaningful for the SQL backend."""
    if repos.session is None:
        return
    for model in [OrderModel, WorkerModel, ServiceModel]:
        await repos.session.execute(delete(model))
    await repos.commit()
    logger.info("Dropped all existing data")


async def seed(data_dir: Path, drop: bool = False, backend: str | None = None) -> dict[str, int]:
    """Main seed function. Returns counts of seeded records."""
    counts = {"services": 0, "workers": 0, "orders": 0}

    services_csv = data_dir / "services.csv"
    workers_csv = data_dir / "workers.csv"
    orders_csv = data_dir / "orders.csv"
    for path in (services_csv, workers_csv):
        if not path.exists():
            raise FileNotFoundError(f"Required CSV not found: {path}")

    async with open_repositories(backend) as repos:
        if drop:
            await _drop_data(repos)

        category_to_service: dict[str, int] = {}
        for sd in load_services(services_csv):
            try:
                category = ServiceCategory(sd["category"])
            except ValueError:
                logger.warning("Service '%s': unknown category '%s', skipping", sd["name"], sd["category"])
                continue
            service = await repos.services.save(
                Service(
                    id=None,
                    category=category,
                    name=sd["name"],
                    base_price=Decimal(str(sd["base_price"])),
                    duration_minutes=sd["duration_minutes"],
                )
            )
            category_to_service.setdefault(category.value, service.id)
            counts["services"] += 1

        for wd in load_workers(workers_csv):
            try:
                availability = WorkerAvailability(wd["availability"])
            except ValueError:
                logger.warning("Worker '%s': unknown availability '%s', using offline",
                               wd["employee_id"], wd["availability"])
                availability = WorkerAvailability.OFFLINE
            location = None
            if wd["lat"] is not None and wd["lng"] is not None:
                location = GeoPoint(latitude=wd["lat"], longitude=wd["lng"])
            await repos.workers.save(
                Worker(
                    id=None,
                    employee_id=wd["employee_id"],
                    specializations=wd["specializations"],
                    availability=availability,
                    location=location,
                    average_rating=wd["average_rating"],
                )
            )
            counts["workers"] += 1

        if orders_csv.exists():
            for od in load_orders(orders_csv):
                service_id = category_to_service.get(od["service_category"])
                if service_id is None:
                    logger.warning("Order '%s': no service for category '%s', skipping",
                                   od["tracking_id"], od["service_category"])
                    continue
                try:
                    status = OrderStatus(od["status"])
                except ValueError:
                    logger.warning("Order '%s': unknown status '%s', skipping",
                                   od["tracking_id"], od["status"])
                    continue
                location = None
                if od["lat"] is not None and od["lng"] is not None:
                    location = CustomerLocation(lat=od["lat"], lng=od["lng"], address=od["address"])
                await repos.orders.save(
                    Order(
                        id=None,
                        tracking_id=od["tracking_id"],
                        service_id=service_id,
                        customer_location=location,
                        status=status,
                    )
                )
                counts["orders"] += 1
        else:
            logger.info("No orders CSV found, skipping order import")

        await repos.commit()

    logger.info(
        "Seed complete: %d services, %d workers, %d orders",
        counts["services"], counts["workers"], counts["orders"],
    )
    return counts


def main():
    parser = argparse.ArgumentParser(description="Seed dispatch storage from CSV files")
    parser.add_argument(
        "--data-dir", type=str, default="data",
        help="Directory containing services.csv, workers.csv and orders.csv (default: data)",
    )
    parser.add_argument(
        "--drop", action="store_true",
        help="Drop existing data before seeding",
    )
    args = parser.parse_args()

    data_dir = Path(args.data_dir)
    if not data_dir.exists():
        logger.error("Data directory not found: %s", data_dir)
        sys.exit(1)

    asyncio.run(seed(data_dir, drop=args.drop))


if __name__ == "__main__":
    main()
