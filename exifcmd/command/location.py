"""GPS coordinates and locality names as exiftool write arguments."""

import shlex
from dataclasses import dataclass

from exifcmd.errors import InvalidInputError


# Each locality field is written to both its IPTC and XMP home.
LOCALITY_TAGS = {
    "city": ("IPTC:City", "XMP-photoshop:City"),
    "state": ("IPTC:Province-State", "XMP-photoshop:State"),
    "country": ("IPTC:Country-PrimaryLocationName", "XMP-photoshop:Country"),
    "country_code": ("IPTC:Country-PrimaryLocationCode", "XMP-iptcCore:CountryCode"),
    "location": ("IPTC:Sub-location", "XMP-iptcCore:Location"),
}

STRIP_LOCATION_TAGS = ["-gps:all=", shlex.quote("-xmp:gps*=")]


@dataclass
class Location:
    """A point on the globe plus optional locality names.

    Latitude and longitude are signed decimal degrees (south and west are
    negative); altitude is meters, negative below sea level.
    """

    latitude: float | None = None
    longitude: float | None = None
    altitude: float | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    country_code: str | None = None
    location: str | None = None

    def validate(self) -> None:
        if self.latitude is None and self.longitude is None and not any(
            getattr(self, name) for name in LOCALITY_TAGS
        ):
            raise InvalidInputError("Coordinates or locality names are required.")
        if (self.latitude is None) != (self.longitude is None):
            raise InvalidInputError("Latitude and longitude must be given together.")
        if self.latitude is not None and not -90 <= self.latitude <= 90:
            raise InvalidInputError(f"Latitude out of range: {self.latitude}")
        if self.longitude is not None and not -180 <= self.longitude <= 180:
            raise InvalidInputError(f"Longitude out of range: {self.longitude}")

    def to_tags(self) -> list[str]:
        """Shell-ready write arguments, one token per tag assignment."""
        self.validate()
        tags: list[str] = []
        if self.latitude is not None and self.longitude is not None:
            tags += [
                f"-GPSLatitude={_number(abs(self.latitude))}",
                f"-GPSLatitudeRef={'S' if self.latitude < 0 else 'N'}",
                f"-GPSLongitude={_number(abs(self.longitude))}",
                f"-GPSLongitudeRef={'W' if self.longitude < 0 else 'E'}",
            ]
        if self.altitude is not None:
            tags += [
                f"-GPSAltitude={_number(abs(self.altitude))}",
                f"-GPSAltitudeRef={1 if self.altitude < 0 else 0}",
            ]
        for name, tag_names in LOCALITY_TAGS.items():
            value = getattr(self, name)
            if value:
                tags += [shlex.quote(f"-{tag}={value}") for tag in tag_names]
        return tags


def _number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


NULL_ISLAND = Location(latitude=0.0, longitude=0.0, altitude=0.0)

# Fixed demonstration point.
POINT_NEMO = Location(latitude=-22.319469, longitude=-114.189505, altitude=10000)
