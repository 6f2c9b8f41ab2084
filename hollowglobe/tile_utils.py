import math
from dataclasses import dataclass

#-------------------------------------------------------
# TILE ADDRESSING
#-------------------------------------------------------
MAX_LATITUDE = 85.0511287798066
EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111.32


@dataclass(frozen=True)
class TileAddress:
    '''Slippy-map tile address, y grows southward from the top row'''
    x: int
    y: int
    level: int

    def __post_init__(self) -> None:
        if self.level < 0:
            raise ValueError(f"Invalid level: {self.level}")
        n = tile_count(self.level)
        if not (0 <= self.x < n):
            raise ValueError(f"x out of range at level={self.level}: {self.x}")
        if not (0 <= self.y < n):
            raise ValueError(f"y out of range at level={self.level}: {self.y}")

    def __str__(self):
        return f"{self.level}/{self.x}/{self.y}"


@dataclass(frozen=True)
class GeoBounds:
    '''Geographic extent of a tile in degrees'''
    north: float
    south: float
    east: float
    west: float

    @property
    def center(self) -> tuple[float, float]:
        '''(lat, lon) midpoint of the bounds'''
        return (self.north + self.south) / 2.0, (self.east + self.west) / 2.0

    def contains(self, lat: float, lon: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lon <= self.east


def clamp(a, b, c):
    return max(b, min(c, a))

def tile_count(level: int) -> int:
    '''Number of tiles along one axis at a level'''
    return 2 ** level

def latlon_to_tile(lat: float, lon: float, level: int) -> TileAddress:
    """Convert lat/lon to the tile containing it

    Parameters
    ----------
    lat : float
        latitude in degrees, within +/- MAX_LATITUDE
    lon : float
        longitude in degrees
    level : int
        quadtree level

    Returns
    -------
    address : TileAddress
        Indices are clamped to the grid, nothing wraps
    """
    n = tile_count(level)
    x = math.floor((lon + 180.0) / 360.0 * n)
    lat_rad = math.radians(lat)
    y = math.floor((1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n)
    return TileAddress(x=clamp(x, 0, n - 1), y=clamp(y, 0, n - 1), level=level)

def tile2lon(x: float, level: int) -> float:
    n = tile_count(level)
    return x / n * 360.0 - 180.0

def tile2lat(y: float, level: int) -> float:
    n = tile_count(level)
    lat_rad = math.atan(math.sinh(math.pi * (1 - 2 * y / n)))
    return math.degrees(lat_rad)

def tile_bounds(address: TileAddress) -> GeoBounds:
    '''Exact geographic bounds of a tile'''
    x, y, level = address.x, address.y, address.level
    return GeoBounds(
        north=tile2lat(y, level),
        south=tile2lat(y + 1, level),
        east=tile2lon(x + 1, level),
        west=tile2lon(x, level),
    )

def tile_size_km(bounds: GeoBounds) -> float:
    """Approximate edge length of a tile

    Longitude spans are scaled by cos() of the mean latitude. Only good
    enough to drive subdivision decisions.
    """
    lat_span = abs(bounds.north - bounds.south)
    lon_span = abs(bounds.east - bounds.west)
    mean_lat = (bounds.north + bounds.south) / 2.0
    km_per_deg_lon = KM_PER_DEGREE * math.cos(math.radians(mean_lat))
    return max(lat_span * KM_PER_DEGREE, lon_span * km_per_deg_lon)

def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    '''Great-circle distance between two points in km'''
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2))
         * math.sin(d_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c

def child_tiles(address: TileAddress) -> list[TileAddress]:
    '''The four children of a tile, in (2x,2y), (2x+1,2y), (2x,2y+1), (2x+1,2y+1) order'''
    x, y, level = 2 * address.x, 2 * address.y, address.level + 1
    return [
        TileAddress(x, y, level),
        TileAddress(x + 1, y, level),
        TileAddress(x, y + 1, level),
        TileAddress(x + 1, y + 1, level),
    ]

def parent_tile(address: TileAddress) -> TileAddress:
    if address.level == 0:
        raise ValueError("Level 0 tile has no parent")
    return TileAddress(address.x // 2, address.y // 2, address.level - 1)

def is_ancestor(ancestor: TileAddress, tile: TileAddress) -> bool:
    '''True if ``ancestor`` strictly contains ``tile`` in the quadtree'''
    shift = tile.level - ancestor.level
    if shift <= 0:
        return False
    return (tile.x >> shift) == ancestor.x and (tile.y >> shift) == ancestor.y
