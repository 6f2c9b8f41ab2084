import numpy as np

def spherical_to_cartesian(lat, lon, r):
    """Convert latitude, longitude and radius to scene coordinates

    The scene frame has +Y toward the north pole and latitude 0,
    longitude 0 on +Z. Longitude is negated before the transform so that
    east runs toward -X, which keeps imagery unmirrored when the sphere
    is seen from the inside:

        phi   = 90 - lat
        theta = -lon
        x = r * sin(phi) * sin(theta)
        y = r * cos(phi)
        z = r * sin(phi) * cos(theta)

    Parameters
    ----------
    lat : float | np.ndarray
        Latitude in degrees
    lon : float | np.ndarray
        Longitude in degrees
    r : float | np.ndarray
        Distance from the sphere center (km)

    Returns
    -------
    x : float | np.ndarray
    y : float | np.ndarray
    z : float | np.ndarray
    """
    phi = np.radians(90.0 - np.asarray(lat, dtype=np.float64))
    theta = -np.radians(np.asarray(lon, dtype=np.float64))

    x = r * np.sin(phi) * np.sin(theta)
    y = r * np.cos(phi)
    z = r * np.sin(phi) * np.cos(theta)

    return x, y, z

def cartesian_to_spherical(x, y, z) -> [float, float, float]:
    """Inverse of spherical_to_cartesian

    Returns
    -------
    lat : float
        Latitude in degrees
    lon : float
        Longitude in degrees, in (-180, 180]
    r : float
        Distance from the sphere center
    """
    r = float(np.sqrt(x * x + y * y + z * z))
    lat = float(np.degrees(np.arcsin(y / r)))
    lon = float(np.degrees(np.arctan2(-x, z)))
    if lon <= -180.0:
        lon += 360.0
    return lat, lon, r

def camera_frame(lat: float, lon: float) -> np.ndarray:
    """Get the local frame of a viewer standing on the inside of the sphere

    "Up" points toward the sphere center, since the interior ground
    curves overhead.

    Parameters
    ----------
    lat : float
        Latitude in degrees
    lon : float
        Longitude in degrees

    Returns
    -------
    R : np.ndarray
        3x3 matrix whose columns are east, north and up in scene coordinates
    """
    lat_rad = np.radians(lat)
    lon_rad = np.radians(lon)

    east = np.array([
        -np.cos(lon_rad),
        0.0,
        -np.sin(lon_rad)
    ])

    north = np.array([
        np.sin(lat_rad) * np.sin(lon_rad),
        np.cos(lat_rad),
        -np.sin(lat_rad) * np.cos(lon_rad)
    ])

    up = np.array([
        np.cos(lat_rad) * np.sin(lon_rad),
        -np.sin(lat_rad),
        -np.cos(lat_rad) * np.cos(lon_rad)
    ])

    R = np.column_stack([east, north, up])
    return R
