"""Synthetic hazard feed for development.

Generates realistic cyclone, district, advisory and prediction payloads in
the upstream wire format (camelCase JSON) and serves them through an
``httpx.MockTransport`` handler, so the full access path (retry, timeout,
validation, cache, rate limit) runs unchanged without a live service.
"""

import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

logger = logging.getLogger(__name__)

# Tamil Nadu districts
DISTRICTS = [
    {"id": "chennai", "name": "Chennai", "is_coastal": True},
    {"id": "kanchipuram", "name": "Kanchipuram", "is_coastal": True},
    {"id": "tiruvallur", "name": "Tiruvallur", "is_coastal": True},
    {"id": "chengalpattu", "name": "Chengalpattu", "is_coastal": True},
    {"id": "cuddalore", "name": "Cuddalore", "is_coastal": True},
    {"id": "villupuram", "name": "Villupuram", "is_coastal": False},
    {"id": "vellore", "name": "Vellore", "is_coastal": False},
    {"id": "tiruvannamalai", "name": "Tiruvannamalai", "is_coastal": False, "is_hilly": True},
    {"id": "salem", "name": "Salem", "is_coastal": False, "is_hilly": True},
    {"id": "dharmapuri", "name": "Dharmapuri", "is_coastal": False, "is_hilly": True},
]

CYCLONE_NAMES = ["Michaung", "Mandous", "Nivar", "Burevi", "Gaja", "Vardah", "Nada", "Thane"]

WIND_SPEED_RANGES = {
    "low": (40, 62),
    "moderate": (62, 88),
    "high": (88, 118),
    "extreme": (118, 150),
}

UPDATE_TEMPLATES = {
    "imd-bulletin": [
        "Cyclone {name} intensified into a severe cyclonic storm",
        "Depression over Bay of Bengal likely to intensify",
        "Cyclone {name} to cross coast between {location1} and {location2}",
    ],
    "rainfall-alert": [
        "Heavy to very heavy rainfall expected in coastal districts",
        "Red alert issued for {district} district",
        "Extremely heavy rainfall warning for next 24 hours",
    ],
    "govt-announcement": [
        "Schools and colleges closed in {district} district",
        "NDRF teams deployed in vulnerable areas",
        "Emergency helpline numbers activated",
    ],
    "service-advisory": [
        "Power supply may be affected in coastal areas",
        "Public transport services suspended",
        "Fishing activities banned along the coast",
    ],
}

CHENNAI = (13.0827, 80.2707)


def cyclone_category(wind_speed: float) -> str:
    if wind_speed < 62:
        return "depression"
    if wind_speed < 88:
        return "cyclone"
    if wind_speed < 118:
        return "severe-cyclone"
    return "super-cyclone"


def _risk_level(value: float) -> str:
    if value < 0.33:
        return "low"
    if value < 0.67:
        return "moderate"
    return "high"


def _severity_color(score: float) -> str:
    if score < 4:
        return "yellow"
    if score < 7:
        return "orange"
    return "red"


def _iso(moment: datetime) -> str:
    return moment.isoformat()


class MockHazardFeed:
    """Random but plausible hazard data.

    Args:
        severity: Intensity of the generated cyclone scenario.
        seed: Optional seed for reproducible output.
    """

    def __init__(self, severity: str = "moderate", seed: int | None = None) -> None:
        if severity not in WIND_SPEED_RANGES:
            raise ValueError(f"Unknown severity: {severity}")
        self._severity = severity
        self._random = random.Random(seed)

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _coordinate(self, lat: float, lng: float, radius: float) -> dict[str, float]:
        return {
            "lat": lat + (self._random.random() - 0.5) * radius,
            "lng": lng + (self._random.random() - 0.5) * radius,
        }

    def cyclone(self) -> dict[str, Any]:
        low, high = WIND_SPEED_RANGES[self._severity]
        wind_speed = self._random.uniform(low, high)
        pathway = [
            self._coordinate(CHENNAI[0] + i * 0.5, CHENNAI[1] - i * 0.3, 0.5)
            for i in range(self._random.randint(5, 9))
        ]
        now = self._now()
        return {
            "id": f"CYC-{int(now.timestamp() * 1000)}",
            "name": self._random.choice(CYCLONE_NAMES),
            "pathway": pathway,
            "currentPosition": pathway[len(pathway) // 2],
            "windSpeed": round(wind_speed),
            "pressure": round(1010 - (wind_speed / 150) * 100),
            "category": cyclone_category(wind_speed),
            "lastUpdated": _iso(now),
        }

    def districts(self, count: int = 10) -> list[dict[str, Any]]:
        results = []
        for district in DISTRICTS[:count]:
            base = self._random.random()
            score = round(base * 10, 1)
            entry: dict[str, Any] = {
                "districtId": district["id"],
                "districtName": district["name"],
                "rainfallEstimate": round(self._random.uniform(50, 300) * (0.5 + base)),
                "floodingProbability": _risk_level(base),
                "waterloggingRisk": _risk_level(base + self._random.random() * 0.2),
                "windImpact": _risk_level(base - self._random.random() * 0.1),
                "severityScore": score,
                "severityColor": _severity_color(score),
                "isCoastal": district["is_coastal"],
                "isHilly": district.get("is_hilly", False),
            }
            if district["is_coastal"] and base > 0.4:
                entry["stormSurge"] = {
                    "risk": _risk_level(base),
                    "waterLevelRise": round(self._random.uniform(0.5, 3), 1),
                }
            if district.get("is_hilly") and base > 0.3:
                entry["landslideRisk"] = _risk_level(base * 0.8)
            results.append(entry)
        return results

    def updates(self, count: int = 10, types: tuple[str, ...] | None = None) -> list[dict[str, Any]]:
        allowed = list(types or UPDATE_TEMPLATES)
        now = self._now()
        results = []
        for i in range(count):
            update_type = self._random.choice(allowed)
            title = (
                self._random.choice(UPDATE_TEMPLATES[update_type])
                .replace("{name}", self._random.choice(CYCLONE_NAMES))
                .replace("{district}", self._random.choice(DISTRICTS)["name"])
                .replace("{location1}", self._random.choice(DISTRICTS)["name"])
                .replace("{location2}", self._random.choice(DISTRICTS)["name"])
            )
            results.append({
                "id": f"UPD-{int(now.timestamp() * 1000)}-{i}",
                "type": update_type,
                "title": title,
                "content": (
                    f"{title}. Residents are advised to stay indoors and follow safety "
                    "guidelines. For more information, contact local authorities."
                ),
                "source": (
                    "India Meteorological Department"
                    if update_type == "imd-bulletin"
                    else "Tamil Nadu Government"
                ),
                "timestamp": _iso(now - timedelta(seconds=self._random.random() * 86400)),
            })
        return sorted(results, key=lambda u: u["timestamp"], reverse=True)

    def holiday_prediction(self) -> dict[str, Any]:
        level = "high" if self._severity == "extreme" else self._severity
        confidence = {"low": (20, 40), "moderate": (50, 70), "high": (75, 95)}[level]
        rainfall = {"low": (50, 100), "moderate": (100, 200), "high": (200, 350)}[level]
        wind = {"low": (40, 60), "moderate": (60, 90), "high": (90, 130)}[level]
        return {
            "date": _iso(self._now() + timedelta(days=1)),
            "probability": {"low": "low-risk", "moderate": "possible", "high": "likely"}[level],
            "confidence": round(self._random.uniform(*confidence)),
            "factors": {
                "rainfallIntensity": round(self._random.uniform(*rainfall)),
                "windSpeed": round(self._random.uniform(*wind)),
                "alertLevel": {"low": "Yellow Alert", "moderate": "Orange Alert", "high": "Red Alert"}[level],
            },
        }

    def route_analysis(self, source: str, destination: str) -> dict[str, Any]:
        affected = DISTRICTS[: self._random.randint(2, 4)]
        max_rainfall = round(self._random.uniform(100, 300))
        factor = max_rainfall / 300
        if factor > 0.7:
            recommendation = "avoid-travel"
        elif factor > 0.4:
            recommendation = "caution"
        else:
            recommendation = "safe"
        now = self._now()
        return {
            "source": source,
            "destination": destination,
            "affectedDistricts": [d["id"] for d in affected],
            "maxRainfall": max_rainfall,
            "disruptionWindows": [{
                "start": _iso(now + timedelta(hours=2)),
                "end": _iso(now + timedelta(hours=8)),
                "severity": _risk_level(factor),
            }],
            "recommendation": recommendation,
            "riskSegments": [
                {
                    "districtId": d["id"],
                    "districtName": d["name"],
                    "riskLevel": _risk_level(self._random.random()),
                }
                for d in affected
            ],
        }

    def risk_summary(self, districts: list[dict[str, Any]] | None = None) -> dict[str, Any]:
        districts = districts if districts is not None else self.districts()
        scores = [d["severityScore"] for d in districts]
        return {
            "overallSeverity": max(scores) if scores else 0,
            "affectedDistricts": len(districts),
            "highRiskDistricts": [d["districtName"] for d in districts if d["severityScore"] >= 7],
            "activeAlerts": self._random.randint(3, 9),
        }

    def dashboard(self) -> dict[str, Any]:
        districts = self.districts()
        return {
            "cyclone": self.cyclone(),
            "districts": districts,
            "updates": self.updates(15),
            "holidayPrediction": self.holiday_prediction(),
            "riskSummary": self.risk_summary(districts),
        }

    # ── httpx.MockTransport handler ──────────────────────────────────

    def handle(self, request: httpx.Request) -> httpx.Response:
        """Answer a request the way the live hazard service would."""
        path = request.url.path.rstrip("/")

        if path.endswith("/health"):
            return httpx.Response(200, json={"status": "healthy"})

        if path.endswith("/cyclone/current"):
            body: Any = self.cyclone()
        elif path.endswith("/rainfall/districts"):
            body = self.districts()
        elif path.endswith("/alerts/govt"):
            body = self.updates(5, types=("govt-announcement",))
        elif path.endswith("/bulletins/imd"):
            body = self.updates(5, types=("imd-bulletin", "rainfall-alert"))
        elif path.endswith("/holiday/prediction"):
            body = self.holiday_prediction()
        elif path.endswith("/risk/summary"):
            body = self.risk_summary()
        elif path.endswith("/travel/impact"):
            source = request.url.params.get("source")
            destination = request.url.params.get("destination")
            if not source or not destination:
                return httpx.Response(400, json={"detail": "source and destination are required"})
            body = self.route_analysis(source, destination)
        elif path.endswith("/dashboard/full"):
            body = self.dashboard()
        else:
            logger.debug(f"[MOCK] No handler for {path}")
            return httpx.Response(404, json={"detail": "Not found"})

        return httpx.Response(200, json=body)
