"""
Services package for the Playlist Service

This package contains all business logic and service layer components.
"""
from app.services.m3u_parser_service import parse_m3u
from app.services.playlist_fetcher import PlaylistFetcher, fetch_playlist
from app.services.playlist_import_service import PlaylistImportPipeline, import_playlist
from app.services.playlist_query_service import list_categories, list_channels, list_playlists

__all__ = [
    'parse_m3u',
    'PlaylistFetcher',
    'fetch_playlist',
    'PlaylistImportPipeline',
    'import_playlist',
    'list_playlists',
    'list_categories',
    'list_channels',
]
