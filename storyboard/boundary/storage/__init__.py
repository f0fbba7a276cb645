"""
Asset storage boundary.

Exports:
  - AssetStore: Abstract image persistence contract
  - LocalAssetStore: Directory store served under a public path
  - S3AssetStore: S3 bucket store
  - build_asset_store(): Factory selecting the configured backend
  - build_asset_filename(): Descriptive filename helper
"""

from storyboard.boundary.storage.asset_store import (
    AssetStore,
    LocalAssetStore,
    S3AssetStore,
    build_asset_filename,
    build_asset_store,
    detect_image_format,
)

__all__ = [
    "AssetStore",
    "LocalAssetStore",
    "S3AssetStore",
    "build_asset_filename",
    "build_asset_store",
    "detect_image_format",
]
