"""Tests for CSV loader functions."""

import csv
import tempfile
from pathlib import Path

from dispatch_engine.adapters.csv_loader.loader import (
    _parse_float,
    _parse_int,
    load_orders,
    load_services,
    load_workers,
)


def _write_csv(rows: list[dict], path: Path, encoding: str = "utf-8-sig") -> None:
    """Helper to write a test CSV file."""
    if not rows:
        return
    with open(path, "w", encoding=encoding, newline="") as f:
        writer = csv.DictWriter(f, fieldnames=rows[0].keys())
        writer.writeheader()
        writer.writerows(rows)


def test_load_services_basic():
    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(tmpdir) / "services.csv"
        _write_csv([
            {"Category": "CUCI_MOBIL", "Name": "Cuci Mobil Reguler", "Base Price": "50000", "Duration": "60"},
            {"Category": "potong_rumput", "Name": "Potong Rumput", "Base Price": "75000.5", "Duration": "90.0"},
        ], csv_path)

        services = load_services(csv_path)
        assert len(services) == 2
        assert services[0]["category"] == "cuci_mobil"
        assert services[0]["base_price"] == 50000.0
        assert services[0]["duration_minutes"] == 60
        assert services[1]["duration_minutes"] == 90


def test_load_workers_with_specializations():
    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(tmpdir) / "workers.csv"
        _write_csv([
            {"Employee ID": "W001", "Specializations": "cuci_mobil; detailing",
             "Availability": "Available", "Lat": "-6.2088", "Lng": "106.8456", "Rating": "4.8"},
            {"Employee ID": "W002", "Specializations": "",
             "Availability": "", "Lat": "", "Lng": "", "Rating": ""},
        ], csv_path)

        workers = load_workers(csv_path)
        assert workers[0]["employee_id"] == "W001"
        assert workers[0]["specializations"] == {"cuci_mobil", "detailing"}
        assert workers[0]["availability"] == "available"
        assert workers[0]["lat"] == -6.2088
        assert workers[0]["average_rating"] == 4.8

        assert workers[1]["specializations"] == set()
        assert workers[1]["availability"] == "offline"
        assert workers[1]["lat"] is None
        assert workers[1]["average_rating"] is None


def test_load_orders_defaults_to_confirmed():
    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(tmpdir) / "orders.csv"
        _write_csv([
            {"Tracking ID": "ORD-001", "Service Category": "cuci_motor", "Status": "",
             "Lat": "-6.2", "Lng": "106.8", "Address": "Jl. Thamrin 1"},
        ], csv_path)

        orders = load_orders(csv_path)
        assert orders[0]["tracking_id"] == "ORD-001"
        assert orders[0]["service_category"] == "cuci_motor"
        assert orders[0]["status"] == "confirmed"
        assert orders[0]["address"] == "Jl. Thamrin 1"


def test_semicolon_delimiter_with_decimal_comma():
    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(tmpdir) / "workers.csv"
        with open(csv_path, "w", encoding="utf-8-sig", newline="") as f:
            f.write("employee_id;specialization;availability;current_lat;current_lng;average_rating\n")
            f.write("W009;potong_rumput, gardening;busy;-6,21;106,85;4,5\n")

        workers = load_workers(csv_path)
        assert workers[0]["employee_id"] == "W009"
        assert workers[0]["specializations"] == {"potong_rumput", "gardening"}
        assert workers[0]["availability"] == "busy"
        assert workers[0]["lat"] == -6.21
        assert workers[0]["lng"] == 106.85
        assert workers[0]["average_rating"] == 4.5


def test_load_with_bom_and_trailing_spaces():
    """CSV with BOM encoding and trailing spaces in column names."""
    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(tmpdir) / "services.csv"
        with open(csv_path, "w", encoding="utf-8-sig", newline="") as f:
            f.write("Category  ,Name ,Price,Duration Minutes \n")
            f.write("cuci_motor,Cuci Motor,25000,30\n")

        services = load_services(csv_path)
        assert len(services) == 1
        assert services[0]["name"] == "Cuci Motor"
        assert services[0]["base_price"] == 25000.0
        assert services[0]["duration_minutes"] == 30


def test_parse_numbers():
    assert _parse_float("43,238") == 43.238
    assert _parse_float("76.945") == 76.945
    assert _parse_float("n/a") is None
    assert _parse_float("nan") is None
    assert _parse_float("-inf") is None
    assert _parse_float(None) is None
    assert _parse_float("") is None
    assert _parse_int("45.0") == 45
    assert _parse_int("abc") == 0
    assert _parse_int(None) == 0
