import requests

from orderhub.lib.logger import logger


class NominatimGeocoder:

    def __init__(self, base_url="https://nominatim.openstreetmap.org", user_agent="OrderHub/1.0", timeout=10):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            base_url=config.get("GEOCODER_BASE_URL") or "https://nominatim.openstreetmap.org",
            user_agent=config.get("GEOCODER_USER_AGENT") or "OrderHub/1.0",
        )

    def _get(self, path, params):
        response = requests.get(
            f"{self.base_url}/{path}",
            params=params,
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def reverse(self, latitude, longitude):
        """Coordinates -> structured address, None when nothing is found."""
        try:
            data = self._get(
                "reverse",
                {"format": "jsonv2", "lat": latitude, "lon": longitude, "addressdetails": 1},
            )
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Reverse geocoding error: {e}")
            return None

        address = (data or {}).get("address")
        if not address:
            return None
        return {
            "house_no": address.get("house_number", ""),
            "street": address.get("road") or address.get("suburb") or "",
            "landmark": address.get("neighbourhood", ""),
            "city": address.get("city")
            or address.get("town")
            or address.get("village")
            or address.get("county")
            or "",
            "state": address.get("state", ""),
            "pincode": address.get("postcode", ""),
        }

    def forward(self, address):
        """Address string -> {latitude, longitude}, None when nothing is found."""
        try:
            data = self._get("search", {"q": address, "format": "jsonv2", "limit": 1})
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Forward geocoding error: {e}")
            return None

        if not data:
            return None
        try:
            return {
                "latitude": float(data[0]["lat"]),
                "longitude": float(data[0]["lon"]),
            }
        except (KeyError, TypeError, ValueError):
            return None
