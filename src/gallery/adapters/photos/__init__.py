from .base import PhotoFeedClient, PhotosAdapterError
from .unsplash import UnsplashPhotosAdapter

__all__ = ["PhotoFeedClient", "PhotosAdapterError", "UnsplashPhotosAdapter"]
