"""AssetLens – find visually similar image assets in Xcode projects."""

__version__ = "1.0.0"
