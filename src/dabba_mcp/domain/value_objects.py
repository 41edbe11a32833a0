from __future__ import annotations

from enum import Enum

# All enums use (str, Enum) for Python 3.10 compatibility (StrEnum requires 3.11+).


class DestinationType(str, Enum):
    """Destination category encoded by the marker's shape symbol."""

    INDUSTRIAL_ESTATE = "Industrial Estate"
    RESIDENTIAL_CHAWL = "Residential Chawl"
    COMMERCIAL_COMPLEX = "Commercial Complex"
    GOVERNMENT_OFFICE = "Government Office"
    EDUCATIONAL_INSTITUTE = "Educational Institute"


class PriorityLevel(str, Enum):
    """Delivery priority encoded by the marker's color."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    URGENT = "Urgent"
    STANDARD = "Standard"


class MarkerComponent(str, Enum):
    """The part of a marker a validation error refers to."""

    COLOR = "color"
    SYMBOL = "symbol"
    STATION = "station"
    SEQUENCE = "sequence"
    FORMAT = "format"


class HopType(str, Enum):
    BASE_HOP = "Base Hop"  # Collection to local station
    TRANSIT_HOP = "Transit Hop"  # Local train to sorting hub
    TRANSFER_HOP = "Transfer Hop"  # Dadar cross-line interface
    FINAL_HOP = "Final Hop"  # Sorting hub to destination


class ComplexityRating(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class DegradationFactorType(str, Enum):
    DADAR_PENALTY = "Dadar Penalty"
    PEAK_HOUR_JITTER = "Peak Hour Jitter"
    RAIN_VARIABLE = "Rain Variable"


class ReliabilityThreshold(str, Enum):
    OPTIMAL = "OPTIMAL ROUTE"
    MONITORING = "MONITORING ACTIVE (Delay Possible)"
    CRITICAL = "JUGAAD PROTOCOL INITIATED (Critical Delay)"


class ComplicationType(str, Enum):
    JHOL = "jhol"
    DADAR_FAILED = "dadar_failed"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
