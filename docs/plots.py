import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle

from hollowglobe.config import DEFAULT_CONFIG
from hollowglobe.quadtree import count_by_level, select_leaf_tiles
from hollowglobe.tile_fetcher import DEBUG_COLORS


def plot_leaf_tiles(lat=-38.8539766, lon=143.5105863, config=DEFAULT_CONFIG):
    '''Draw the selected leaf tiles in lon/lat space, colored by level'''
    leaves = select_leaf_tiles(lat, lon, config)

    fig, ax = plt.subplots(figsize=(8, 8))
    for node in leaves:
        b = node.bounds
        r, g, bl = DEBUG_COLORS.get(node.level, (0xff, 0xff, 0xff))
        ax.add_patch(Rectangle((b.west, b.south), b.east - b.west, b.north - b.south,
                               facecolor=(r / 255, g / 255, bl / 255), edgecolor='black',
                               linewidth=0.2))

    ax.plot(lon, lat, 'k*', markersize=12)
    ax.autoscale_view()
    ax.set_aspect('equal')
    ax.set_xlabel('Longitude')
    ax.set_ylabel('Latitude')

    counts = ', '.join(f'z{k}: {v}' for k, v in count_by_level(leaves).items())
    plt.title(f"{len(leaves)} leaf tiles ({counts})")
    plt.savefig('leaf_tiles.png')

if __name__ == "__main__":
    plot_leaf_tiles()
