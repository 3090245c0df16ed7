"""CSV loader — reads and normalizes service / worker / order data files."""

from __future__ import annotations

import csv
import logging
import math
from pathlib import Path

from dispatch_engine.adapters.csv_loader.normalizer import (
    clean_string,
    normalize_column_name,
    normalize_tag,
    parse_specializations,
)

logger = logging.getLogger(__name__)


def _sniff_dialect(sample: str) -> type[csv.Dialect] | csv.Dialect:
    """Detect the delimiter (comma/semicolon/tab) used by spreadsheet exports."""
    if not sample:
        return csv.get_dialect("excel")

    first_line = sample.splitlines()[0]
    delims = [";", ",", "\t"]
    counts = {d: first_line.count(d) for d in delims}
    best_delim = max(counts, key=counts.get)

    if counts[best_delim] > 0:
        class DynamicDialect(csv.excel):
            delimiter = best_delim
        return DynamicDialect

    return csv.get_dialect("excel")


def _read_csv(file_path: Path, encoding: str = "utf-8-sig") -> list[dict[str, str | None]]:
    """Read a CSV file with BOM handling and column normalization.

    Args:
        file_path: path to the CSV file.
        encoding: file encoding (utf-8-sig strips BOM automatically).

    Returns:
        List of dicts with normalized column names.
    """
    with open(file_path, encoding=encoding, newline="") as f:
        sample = f.read(4096)
        f.seek(0)
        reader = csv.DictReader(f, dialect=_sniff_dialect(sample))
        if reader.fieldnames is None:
            raise ValueError(f"CSV file {file_path} has no header row")

        col_map = {col: normalize_column_name(col) for col in reader.fieldnames}
        rows = [
            {col_map[k]: clean_string(v) for k, v in raw_row.items() if k is not None}
            for raw_row in reader
        ]

    logger.info("Loaded %d rows from %s (columns: %s)", len(rows), file_path.name, list(col_map.values()))
    return rows


def load_services(file_path: Path) -> list[dict]:
    """Expected columns: category, name, base_price, duration (minutes)."""
    services = []
    for row in _read_csv(file_path):
        services.append({
            "category": normalize_tag(row.get("category")),
            "name": row.get("name") or "",
            "base_price": _parse_float(row.get("base_price") or row.get("price")) or 0.0,
            "duration_minutes": _parse_int(row.get("duration") or row.get("duration_minutes")),
        })
    logger.info("Parsed %d services", len(services))
    return services


def load_workers(file_path: Path) -> list[dict]:
    """Expected columns: employee_id, specializations, availability, lat, lng, rating."""
    workers = []
    for row in _read_csv(file_path):
        workers.append({
            "employee_id": row.get("employee_id") or row.get("id") or "",
            "specializations": parse_specializations(
                row.get("specializations") or row.get("specialization")
            ),
            "availability": normalize_tag(row.get("availability")) or "offline",
            "lat": _parse_float(row.get("lat") or row.get("current_lat")),
            "lng": _parse_float(row.get("lng") or row.get("current_lng")),
            "average_rating": _parse_float(row.get("rating") or row.get("average_rating")),
        })
    logger.info("Parsed %d workers", len(workers))
    return workers


def load_orders(file_path: Path) -> list[dict]:
    """Expected columns: tracking_id, service_category, status, lat, lng, address."""
    orders = []
    for row in _read_csv(file_path):
        orders.append({
            "tracking_id": row.get("tracking_id") or "",
            "service_category": normalize_tag(row.get("service_category") or row.get("category")),
            "status": normalize_tag(row.get("status")) or "confirmed",
            "lat": _parse_float(row.get("lat") or row.get("customer_lat")),
            "lng": _parse_float(row.get("lng") or row.get("customer_lng")),
            "address": row.get("address") or "",
        })
    logger.info("Parsed %d orders", len(orders))
    return orders


def _parse_float(value: str | None) -> float | None:
    """Safely parse a float, accepting a decimal comma. "nan" and "inf" give None."""
    if not value:
        return None
    try:
        number = float(value.replace(",", ".").strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _parse_int(value: str | None) -> int:
    if not value:
        return 0
    try:
        # handle "45", "45.0"
        return int(float(value.replace(",", ".").strip()))
    except ValueError:
        return 0
