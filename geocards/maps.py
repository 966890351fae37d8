from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

import staticmaps

from .cache import ArtifactCache
from .config import Marker, RunConfig
from .errors import ArtifactError
from .records import Location

log = logging.getLogger(__name__)

TILE_PROVIDERS: Dict[str, staticmaps.TileProvider] = {
    "thunderforest-outdoors": staticmaps.TileProvider(
        "thunderforest-outdoors",
        url_pattern="https://$s.tile.thunderforest.com/outdoors/$z/$x/$y.png?apikey=$k",
        shards=["a", "b", "c"],
        max_zoom=22,
    ),
    "thunderforest-landscape": staticmaps.TileProvider(
        "thunderforest-landscape",
        url_pattern="https://$s.tile.thunderforest.com/landscape/$z/$x/$y.png?apikey=$k",
        shards=["a", "b", "c"],
        max_zoom=22,
    ),
    "opentopomap": staticmaps.TileProvider(
        "opentopomap",
        url_pattern="https://$s.tile.opentopomap.org/$z/$x/$y.png",
        shards=["a", "b", "c"],
        max_zoom=17,
    ),
    "osm": staticmaps.TileProvider(
        "osm",
        url_pattern="https://$s.tile.openstreetmap.org/$z/$x/$y.png",
        shards=["a", "b", "c"],
        max_zoom=19,
    ),
}


def map_markers(loc: Location, config: RunConfig) -> List[Marker]:
    """Target marker first, then the configured reference points."""
    target = Marker(loc.latitude, loc.longitude, config.target_color, config.target_size)
    return [target, *config.reference_markers]


def build_context(loc: Location, config: RunConfig) -> staticmaps.Context:
    try:
        provider = TILE_PROVIDERS[config.tile_provider]
    except KeyError:
        raise ArtifactError(
            f"unknown tile provider '{config.tile_provider}'", kind="map", identifier=loc.number
        ) from None
    context = staticmaps.Context()
    context.set_tile_provider(provider, api_key=config.api_key)
    for marker in map_markers(loc, config):
        context.add_object(
            staticmaps.Marker(
                staticmaps.create_latlng(marker.latitude, marker.longitude),
                color=staticmaps.Color(*marker.color),
                size=marker.size,
            )
        )
    return context


def write_map_image(loc: Location, path: Path, config: RunConfig) -> None:
    """Render the framed map for ``loc`` and save it as PNG at ``path``.

    Tiles are fetched over the network with no timeout or retry.
    """
    context = build_context(loc, config)
    width, height = config.map_size
    log.debug("Rendering map for %s", loc.number)
    try:
        image = context.render_pillow(width, height)
    except Exception as exc:
        raise ArtifactError(f"map rendering failed: {exc}", kind="map", identifier=loc.number) from exc
    log.debug("Saving map for %s", loc.number)
    image.convert("RGB").save(path, format="PNG")


def get_map_image(loc: Location, cache: ArtifactCache, config: RunConfig, writer=write_map_image) -> Path:
    log.debug("Getting map for %s", loc.number)
    return cache.resolve("map", loc.number, lambda path: writer(loc, path, config))
