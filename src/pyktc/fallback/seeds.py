"""Offline datasets, in the backend's camelCase wire shape.

These lists are never mutated; :class:`~pyktc.fallback.FallbackRepository`
deep-copies them on construction.
"""

from __future__ import annotations

from typing import Any

STATIONS: list[dict[str, Any]] = [
    {
        "id": "accra-central",
        "name": "KTC Accra Central",
        "code": "KTC-ACC-01",
        "location": {"address": "123 Independence Avenue", "city": "Accra", "region": "Greater Accra"},
        "contact": {
            "phone": "+233 24 123 4567",
            "email": "accra.central@ktcenergy.com.gh",
            "manager": {
                "name": "Samuel Osei",
                "phone": "+233 24 987 6543",
                "email": "samuel.osei@ktcenergy.com.gh",
                "userId": "user-acc-001",
            },
        },
        "operational": {
            "status": "ACTIVE",
            "operatingHours": {"open": "06:00", "close": "22:00", "is24Hours": False},
            "fuelTypes": ["Super", "Regular", "Diesel", "Gas"],
            "tankCapacity": {"Super": 50000, "Regular": 50000, "Diesel": 40000, "Gas": 30000},
            "pumpCount": 8,
        },
        "financial": {
            "monthlyTarget": 500000,
            "commissionRate": 2.5,
            "securityDeposit": 50000,
            "lastAuditDate": "2024-11-15",
        },
        "user": {
            "id": "user-acc-001",
            "username": "ktc-acc-01",
            "email": "accra.central@ktcenergy.com.gh",
            "role": "station_manager",
            "status": "ACTIVE",
            "lastLogin": "2024-12-15T08:30:00Z",
            "passwordChanged": True,
            "mustChangePassword": False,
            "accountLocked": False,
            "loginAttempts": 0,
            "createdAt": "2024-01-15T10:00:00Z",
            "lastModifiedAt": "2024-12-01T14:30:00Z",
        },
        "createdBy": "System Admin",
        "createdAt": "2024-01-15T10:00:00Z",
        "lastModifiedBy": "Mary Asante",
        "lastModifiedAt": "2024-12-01T14:30:00Z",
        "notes": "Main flagship station in Accra central business district",
    },
    {
        "id": "kumasi-highway",
        "name": "KTC Kumasi Highway",
        "code": "KTC-KUM-01",
        "location": {"address": "Kumasi-Accra Highway, Mile 7", "city": "Kumasi", "region": "Ashanti"},
        "contact": {
            "phone": "+233 24 234 5678",
            "email": "kumasi.highway@ktcenergy.com.gh",
            "manager": {
                "name": "Kwame Boateng",
                "phone": "+233 24 876 5432",
                "email": "kwame.boateng@ktcenergy.com.gh",
                "userId": "user-kum-001",
            },
        },
        "operational": {
            "status": "ACTIVE",
            "operatingHours": {"open": "05:30", "close": "23:00", "is24Hours": False},
            "fuelTypes": ["Super", "Regular", "Diesel"],
            "tankCapacity": {"Super": 60000, "Regular": 60000, "Diesel": 50000},
            "pumpCount": 12,
        },
        "financial": {
            "monthlyTarget": 750000,
            "commissionRate": 3.0,
            "securityDeposit": 75000,
            "lastAuditDate": "2024-10-20",
        },
        "user": {
            "id": "user-kum-001",
            "username": "ktc-kum-01",
            "email": "kumasi.highway@ktcenergy.com.gh",
            "role": "station_manager",
            "status": "ACTIVE",
            "lastLogin": "2024-12-14T09:15:00Z",
            "passwordChanged": True,
            "mustChangePassword": False,
            "accountLocked": False,
            "loginAttempts": 0,
            "createdAt": "2024-02-01T11:00:00Z",
            "lastModifiedAt": "2024-11-15T16:45:00Z",
        },
        "createdBy": "System Admin",
        "createdAt": "2024-02-01T11:00:00Z",
        "lastModifiedBy": "Joseph Amponsah",
        "lastModifiedAt": "2024-11-15T16:45:00Z",
        "notes": "High-traffic highway station serving long-distance travelers",
    },
    {
        "id": "takoradi-port",
        "name": "KTC Takoradi Port",
        "code": "KTC-TAK-01",
        "location": {"address": "Harbour Road, Near Takoradi Port", "city": "Takoradi", "region": "Western"},
        "contact": {"phone": "+233 24 345 6789", "email": "takoradi.port@ktcenergy.com.gh"},
        "operational": {
            "status": "MAINTENANCE",
            "operatingHours": {"open": "06:00", "close": "20:00", "is24Hours": False},
            "fuelTypes": ["Super", "Regular", "Diesel", "Gas", "Kerosene"],
            "tankCapacity": {"Super": 40000, "Regular": 40000, "Diesel": 60000, "Gas": 25000, "Kerosene": 15000},
            "pumpCount": 6,
        },
        "financial": {"monthlyTarget": 400000, "commissionRate": 2.8, "securityDeposit": 40000},
        "user": {
            "id": "user-tak-001",
            "username": "ktc-tak-01",
            "email": "takoradi.port@ktcenergy.com.gh",
            "role": "station_manager",
            "status": "INACTIVE",
            "passwordChanged": False,
            "mustChangePassword": True,
            "accountLocked": False,
            "loginAttempts": 0,
            "createdAt": "2024-03-10T09:30:00Z",
        },
        "createdBy": "System Admin",
        "createdAt": "2024-03-10T09:30:00Z",
        "notes": "Strategic location near port for commercial vehicles and maritime fuel needs",
    },
]


def _user(
    id: str,
    username: str,
    full_name: str,
    phone: str,
    role: str,
    status: str,
    assigned: list[str],
    created_by: str,
    created_at: str,
    **extra: Any,
) -> dict[str, Any]:
    first, _, last = full_name.partition(" ")
    record: dict[str, Any] = {
        "id": id,
        "username": username,
        "email": f"{username}@ktcenergy.com.gh",
        "phone": phone,
        "role": role,
        "status": status,
        "firstName": first,
        "lastName": last,
        "fullName": full_name,
        "passwordChanged": True,
        "mustChangePassword": False,
        "accountLocked": False,
        "loginAttempts": 0,
        "assignedStations": assigned,
        "createdBy": created_by,
        "createdAt": created_at,
    }
    record.update(extra)
    return record


USERS: list[dict[str, Any]] = [
    _user(
        "user-001", "samuel.osei", "Samuel Osei", "+233 24 987 6543", "station_manager", "ACTIVE",
        ["accra-central"], "System Admin", "2024-01-15T10:00:00Z",
        primaryStation="accra-central", lastLogin="2024-12-15T08:30:00Z",
        lastModifiedBy="Mary Asante", lastModifiedAt="2024-12-01T14:30:00Z",
    ),
    _user(
        "user-002", "kwame.boateng", "Kwame Boateng", "+233 24 876 5432", "station_manager", "ACTIVE",
        ["kumasi-highway"], "System Admin", "2024-02-01T11:00:00Z",
        primaryStation="kumasi-highway", lastLogin="2024-12-14T09:15:00Z",
        lastModifiedBy="Joseph Amponsah", lastModifiedAt="2024-11-15T16:45:00Z",
    ),
    _user(
        "user-003", "mary.asante", "Mary Asante", "+233 24 765 4321", "admin", "ACTIVE",
        ["accra-central", "kumasi-highway", "cape-coast"], "Joseph Amponsah", "2024-01-10T08:00:00Z",
        lastLogin="2024-12-15T07:45:00Z",
        lastModifiedBy="Joseph Amponsah", lastModifiedAt="2024-10-20T12:30:00Z",
    ),
    # Super admins reach every station without explicit assignments.
    _user(
        "user-004", "joseph.amponsah", "Joseph Amponsah", "+233 24 654 3210", "super_admin", "ACTIVE",
        [], "System", "2024-01-01T00:00:00Z",
        lastLogin="2024-12-15T06:00:00Z",
    ),
    _user(
        "user-005", "akosua.mensah", "Akosua Mensah", "+233 24 543 2109", "station_manager", "ACTIVE",
        ["cape-coast"], "Mary Asante", "2024-04-12T12:00:00Z",
        primaryStation="cape-coast", lastLogin="2024-12-13T07:45:00Z",
        lastModifiedBy="Mary Asante", lastModifiedAt="2024-10-05T15:20:00Z",
    ),
    _user(
        "user-006", "eric.asante", "Eric Asante", "+233 24 432 1098", "station_manager", "ACTIVE",
        ["tema-industrial"], "Joseph Amponsah", "2024-05-20T09:30:00Z",
        primaryStation="tema-industrial", lastLogin="2024-12-15T06:00:00Z",
        lastModifiedBy="Mary Asante", lastModifiedAt="2024-12-10T11:15:00Z",
    ),
    _user(
        "user-007", "ama.yeboah", "Ama Yeboah", "+233 24 321 0987", "station_manager", "INACTIVE",
        [], "Mary Asante", "2024-11-01T14:00:00Z",
        passwordChanged=False, mustChangePassword=True,
    ),
    _user(
        "user-008", "kwaku.mensah", "Kwaku Mensah", "+233 24 210 9876", "admin", "SUSPENDED",
        ["takoradi-port", "western-region-stations"], "Joseph Amponsah", "2024-03-10T09:30:00Z",
        lastLogin="2024-11-20T16:30:00Z",
        lastModifiedBy="Joseph Amponsah", lastModifiedAt="2024-11-21T10:00:00Z",
    ),
]


def _entry(
    id: int,
    date: str,
    vehicles: int,
    price: float,
    expenses: float,
    status: str,
    station_id: str,
    station_name: str,
    created_by: str,
) -> dict[str, Any]:
    # Seeded ledger lines were all recorded at a 20% washing-bay commission.
    total = vehicles * price
    commission = round(total * 0.2, 2)
    return {
        "id": id,
        "date": date,
        "noOfVehicles": vehicles,
        "pricePerVehicle": price,
        "totalSale": total,
        "washingBayCommission": commission,
        "washingBayCommissionRate": 20,
        "companyCommission": round(total - commission, 2),
        "expenses": expenses,
        "bankDeposit": round(total - expenses, 2),
        "balancing": 0.0,
        "kodsonStatus": status,
        "stationId": station_id,
        "stationName": station_name,
        "createdBy": created_by,
    }


WASHING_BAY_ENTRIES: list[dict[str, Any]] = [
    _entry(1, "Dec 1, 2024", 25, 100.0, 150.0, "Complete", "accra-central", "KTC Accra Central", "Samuel Osei"),
    _entry(2, "Dec 2, 2024", 30, 100.0, 200.0, "Complete", "accra-central", "KTC Accra Central", "Mary Asante"),
    _entry(3, "Dec 3, 2024", 22, 100.0, 120.0, "Complete", "accra-central", "KTC Accra Central", "Kwame Boateng"),
    _entry(4, "Dec 4, 2024", 35, 100.0, 250.0, "Pending", "accra-central", "KTC Accra Central", "Joseph Amponsah"),
    _entry(5, "Dec 1, 2024", 18, 95.0, 100.0, "Complete", "kumasi-highway", "KTC Kumasi Highway", "Akwasi Prempeh"),
    _entry(6, "Dec 2, 2024", 28, 110.0, 180.0, "Pending", "takoradi-port", "KTC Takoradi Port", "Kofi Asante"),
]
